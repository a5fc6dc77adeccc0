# MIT License
# Copyright (c) 2025 Hashborn

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ..config.params import NATIVE_ASSET_CODE

_CODE_RE = re.compile(r"^[A-Za-z0-9]{1,12}$")


class Asset(BaseModel):
    """Native asset (no issuer) or a credit asset identified by code + issuer."""
    model_config = ConfigDict(frozen=True)

    code: str = NATIVE_ASSET_CODE
    issuer: Optional[str] = None

    @model_validator(mode="after")
    def _check_code(self) -> "Asset":
        if self.issuer is None:
            if self.code != NATIVE_ASSET_CODE:
                raise ValueError(f"Asset {self.code!r} has no issuer and is not the native asset")
        elif not _CODE_RE.match(self.code):
            raise ValueError(f"Invalid asset code: {self.code!r}")
        return self

    @classmethod
    def native(cls) -> "Asset":
        return cls(code=NATIVE_ASSET_CODE, issuer=None)

    @classmethod
    def credit(cls, code: str, issuer: str) -> "Asset":
        return cls(code=code, issuer=issuer)

    @property
    def is_native(self) -> bool:
        return self.issuer is None

    def key(self) -> str:
        """Stable string form, used in ledger keys (CODE:ISSUER or 'native')."""
        if self.is_native:
            return "native"
        return f"{self.code}:{self.issuer}"

    def __str__(self) -> str:
        return self.key()

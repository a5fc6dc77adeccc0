# MIT License
# Copyright (c) 2025 Hashborn

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..crypto.hash import sha256_hex
from .asset import Asset
from .common import OperationType
from .entry import Claimant, LedgerKey


class BaseOperation(BaseModel):
    # Defaults to the transaction source when unset
    source_account: Optional[str] = None


class BeginSponsoringFutureReserves(BaseOperation):
    type: Literal[OperationType.BEGIN_SPONSORING_FUTURE_RESERVES] = OperationType.BEGIN_SPONSORING_FUTURE_RESERVES
    sponsored_id: str


class EndSponsoringFutureReserves(BaseOperation):
    type: Literal[OperationType.END_SPONSORING_FUTURE_RESERVES] = OperationType.END_SPONSORING_FUTURE_RESERVES


class RevokeSponsorship(BaseOperation):
    type: Literal[OperationType.REVOKE_SPONSORSHIP] = OperationType.REVOKE_SPONSORSHIP
    target: LedgerKey


class CreateClaimableBalance(BaseOperation):
    type: Literal[OperationType.CREATE_CLAIMABLE_BALANCE] = OperationType.CREATE_CLAIMABLE_BALANCE
    asset: Asset
    amount: int
    claimants: List[Claimant]


class ClaimClaimableBalance(BaseOperation):
    type: Literal[OperationType.CLAIM_CLAIMABLE_BALANCE] = OperationType.CLAIM_CLAIMABLE_BALANCE
    balance_id: str


class CreateAccount(BaseOperation):
    type: Literal[OperationType.CREATE_ACCOUNT] = OperationType.CREATE_ACCOUNT
    destination: str
    starting_balance: int


class ChangeTrust(BaseOperation):
    type: Literal[OperationType.CHANGE_TRUST] = OperationType.CHANGE_TRUST
    asset: Asset
    limit: int  # 0 removes the trustline


class ManageData(BaseOperation):
    type: Literal[OperationType.MANAGE_DATA] = OperationType.MANAGE_DATA
    name: str
    value: Optional[str] = None  # None removes the entry


class SetSigner(BaseOperation):
    type: Literal[OperationType.SET_SIGNER] = OperationType.SET_SIGNER
    signer_key: str
    weight: int  # 0 removes the signer


class ManageOffer(BaseOperation):
    type: Literal[OperationType.MANAGE_OFFER] = OperationType.MANAGE_OFFER
    offer_id: int
    selling: Asset
    buying: Asset
    amount: int  # 0 removes the offer


Operation = Annotated[
    Union[
        BeginSponsoringFutureReserves,
        EndSponsoringFutureReserves,
        RevokeSponsorship,
        CreateClaimableBalance,
        ClaimClaimableBalance,
        CreateAccount,
        ChangeTrust,
        ManageData,
        SetSigner,
        ManageOffer,
    ],
    Field(discriminator="type"),
]


class Transaction(BaseModel):
    source_account: str
    seq_num: int
    operations: List[Operation] = Field(default_factory=list)
    memo: str = ""

    def hash(self) -> str:
        return sha256_hex(self.model_dump_json().encode("utf-8"))

    def op_source(self, index: int) -> str:
        """Effective source account of operation `index`."""
        return self.operations[index].source_account or self.source_account

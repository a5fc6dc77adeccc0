# MIT License
# Copyright (c) 2025 Hashborn

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .asset import Asset
from .common import EntryKind
from .predicate import ClaimPredicate


class LedgerKey(BaseModel):
    """
    Identifies a ledger entry.

    - ACCOUNT:           account_id, name ""
    - TRUSTLINE:         account_id, name = asset key
    - OFFER:             account_id, name = offer id
    - DATA:              account_id, name = data name
    - SIGNER:            account_id, name = signer key
    - CLAIMABLE_BALANCE: account_id None, name = balance id
    """
    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    account_id: Optional[str] = None
    name: str = ""

    def as_str(self) -> str:
        return f"{self.kind.value}:{self.account_id or ''}:{self.name}"

    @classmethod
    def account(cls, account_id: str) -> "LedgerKey":
        return cls(kind=EntryKind.ACCOUNT, account_id=account_id)

    @classmethod
    def trustline(cls, account_id: str, asset: Asset) -> "LedgerKey":
        return cls(kind=EntryKind.TRUSTLINE, account_id=account_id, name=asset.key())

    @classmethod
    def offer(cls, account_id: str, offer_id: int) -> "LedgerKey":
        return cls(kind=EntryKind.OFFER, account_id=account_id, name=str(offer_id))

    @classmethod
    def data(cls, account_id: str, name: str) -> "LedgerKey":
        return cls(kind=EntryKind.DATA, account_id=account_id, name=name)

    @classmethod
    def signer(cls, account_id: str, signer_key: str) -> "LedgerKey":
        return cls(kind=EntryKind.SIGNER, account_id=account_id, name=signer_key)

    @classmethod
    def claimable_balance(cls, balance_id: str) -> "LedgerKey":
        return cls(kind=EntryKind.CLAIMABLE_BALANCE, name=balance_id)


class SubEntry(BaseModel):
    """Base for entries owned by an account and counted in its num_sub_entries."""
    account_id: str                 # Owner
    sponsor: Optional[str] = None   # Account paying this entry's reserve, if not the owner

    @property
    def owner_id(self) -> str:
        return self.account_id

    def reserve_weight(self) -> int:
        return 1


class TrustLineEntry(SubEntry):
    kind: Literal[EntryKind.TRUSTLINE] = EntryKind.TRUSTLINE
    asset: Asset
    balance: int = 0
    limit: int

    def key(self) -> LedgerKey:
        return LedgerKey.trustline(self.account_id, self.asset)


class OfferEntry(SubEntry):
    kind: Literal[EntryKind.OFFER] = EntryKind.OFFER
    offer_id: int
    selling: Asset
    buying: Asset
    amount: int

    def key(self) -> LedgerKey:
        return LedgerKey.offer(self.account_id, self.offer_id)


class DataEntry(SubEntry):
    kind: Literal[EntryKind.DATA] = EntryKind.DATA
    name: str
    value: str

    def key(self) -> LedgerKey:
        return LedgerKey.data(self.account_id, self.name)


class SignerEntry(SubEntry):
    kind: Literal[EntryKind.SIGNER] = EntryKind.SIGNER
    signer_key: str
    weight: int

    def key(self) -> LedgerKey:
        return LedgerKey.signer(self.account_id, self.signer_key)


AnySubEntry = Annotated[
    Union[TrustLineEntry, OfferEntry, DataEntry, SignerEntry],
    Field(discriminator="kind"),
]


class Claimant(BaseModel):
    destination: str
    predicate: ClaimPredicate


class ClaimableBalanceEntry(BaseModel):
    """
    Funds held by the ledger until one of the claimants claims them.

    Has no owning account. Its reserve (one base reserve per claimant) is
    always carried by `sponsor`: the creator, or the creator's active
    sponsor at creation time.
    """
    kind: Literal[EntryKind.CLAIMABLE_BALANCE] = EntryKind.CLAIMABLE_BALANCE
    balance_id: str
    asset: Asset
    amount: int
    claimants: List[Claimant]
    created_time: int               # Ledger close time at creation
    sponsor: str

    def key(self) -> LedgerKey:
        return LedgerKey.claimable_balance(self.balance_id)

    @property
    def owner_id(self) -> Optional[str]:
        return None

    def reserve_weight(self) -> int:
        return len(self.claimants)

    def find_claimant(self, account_id: str) -> Optional[Claimant]:
        for claimant in self.claimants:
            if claimant.destination == account_id:
                return claimant
        return None


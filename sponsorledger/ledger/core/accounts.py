# MIT License
# Copyright (c) 2025 Hashborn

from typing import Optional

from pydantic import BaseModel

from ...protocol.config.params import ACCOUNT_BASE_RESERVES


class Account(BaseModel):
    account_id: str
    balance: int = 0
    seq_num: int = 0

    # Reserve counters
    num_sub_entries: int = 0    # Trustlines, offers, data entries, signers
    num_sponsoring: int = 0     # Base reserves this account pays for others
    num_sponsored: int = 0      # Base reserves others pay for this account

    # Native amount locked by open sell offers
    selling_liabilities: int = 0

    # Sponsor of the account entry itself (set when created under sponsorship)
    sponsor: Optional[str] = None

    @property
    def owner_id(self) -> str:
        return self.account_id

    def reserve_weight(self) -> int:
        return ACCOUNT_BASE_RESERVES

    def minimum_balance(self, base_reserve: int) -> int:
        """
        (2 + numSubEntries + numSponsoring - numSponsored) * baseReserve + sellingLiabilities

        Sponsored sub-entries raise both num_sub_entries and num_sponsored,
        so they cancel out and cost the owner nothing.
        """
        reserves = 2 + self.num_sub_entries + self.num_sponsoring - self.num_sponsored
        return reserves * base_reserve + self.selling_liabilities

    def available_balance(self, base_reserve: int) -> int:
        return self.balance - self.minimum_balance(base_reserve)

    def can_afford_reserves(self, extra_reserves: int, base_reserve: int) -> bool:
        """True if the balance still covers the minimum after `extra_reserves` more base reserves."""
        return self.balance >= self.minimum_balance(base_reserve) + extra_reserves * base_reserve

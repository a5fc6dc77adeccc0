# MIT License
# Copyright (c) 2025 Hashborn

"""
Sponsorship reserve accounting.

An account A "is sponsoring future reserves for" B between a
BeginSponsoringFutureReserves(A -> B) and B's EndSponsoringFutureReserves,
inside one transaction. While that relationship is open, every entry B
creates is charged to A's reserve instead of B's:

    A.num_sponsoring += w
    B.num_sponsored  += w
    B.num_sub_entries += w    (sub-entries only)

where w is the entry's reserve weight (2 for an account, 1 for a
sub-entry, one per claimant for a claimable balance). The owner's
sub-entry and sponsored increments cancel in the minimum balance formula.

Every operation checks its preconditions (including reserves) before it
mutates anything, so a failing call leaves counters unchanged.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from .accounts import Account
from .state import LedgerState
from ...protocol.config.params import LedgerConfig
from ...protocol.types.common import SPONSORABLE_KINDS
from ...protocol.types.entry import (
    ClaimableBalanceEntry,
    LedgerKey,
    SubEntry,
)
from ...protocol.types.errors import (
    AlreadySponsored,
    EntryNotFound,
    LowReserve,
    MalformedOperation,
    NoAccount,
    NotSponsor,
    NotSponsorable,
    NotSponsored,
    OnlyTransferable,
    OpenSponsorshipAtCommit,
    RecursiveSponsorship,
)

logger = logging.getLogger(__name__)


class SponsorshipContext:
    """
    Open is-sponsoring-future-reserves-for relationships of one transaction.

    Maps sponsored account -> sponsoring account. Created empty when a
    transaction starts and dropped when it ends.
    """

    def __init__(self):
        self._sponsors: Dict[str, str] = {}

    def sponsor_of(self, account_id: str) -> Optional[str]:
        return self._sponsors.get(account_id)

    def is_sponsoring(self, account_id: str) -> bool:
        return account_id in self._sponsors.values()

    def begin(self, sponsored_id: str, sponsor_id: str) -> None:
        self._sponsors[sponsored_id] = sponsor_id

    def end(self, sponsored_id: str) -> None:
        del self._sponsors[sponsored_id]

    def open_relationships(self) -> Dict[str, str]:
        return dict(self._sponsors)

    def __len__(self) -> int:
        return len(self._sponsors)


class RevokeOutcome(str, Enum):
    TRANSFERRED = "TRANSFERRED"
    REMOVED = "REMOVED"
    ESTABLISHED = "ESTABLISHED"
    NO_OP = "NO_OP"


class SponsorshipLedger:
    def __init__(self, state: LedgerState, config: LedgerConfig):
        self.state = state
        self.config = config

    # --- helpers ---
    def require_account(self, account_id: str) -> Account:
        acc = self.state.get_account(account_id)
        if acc is None:
            raise NoAccount(f"Account {account_id} does not exist", {"account_id": account_id})
        return acc

    def _require_reserve(self, account: Account, extra_reserves: int) -> None:
        if not account.can_afford_reserves(extra_reserves, self.config.base_reserve):
            raise LowReserve(
                f"Account {account.account_id} cannot cover {extra_reserves} more base reserve(s)",
                {
                    "account_id": account.account_id,
                    "balance": account.balance,
                    "minimum_balance": self.minimum_balance(account),
                    "extra_reserves": extra_reserves,
                },
            )

    def minimum_balance(self, account: Account) -> int:
        return account.minimum_balance(self.config.base_reserve)

    # --- relationships ---
    def begin_sponsoring_future_reserves(self, ctx: SponsorshipContext, source: str, sponsored_id: str) -> None:
        if source == sponsored_id:
            raise MalformedOperation("An account cannot sponsor its own reserves")
        self.require_account(source)

        if ctx.sponsor_of(sponsored_id) is not None:
            raise AlreadySponsored(
                f"{sponsored_id} is already sponsored by {ctx.sponsor_of(sponsored_id)}",
                {"sponsored_id": sponsored_id},
            )
        # No chains: a sponsored account may not sponsor, a sponsor may not be sponsored
        if ctx.sponsor_of(source) is not None or ctx.is_sponsoring(sponsored_id):
            raise RecursiveSponsorship(
                f"Sponsorship {source} -> {sponsored_id} would chain",
                {"source": source, "sponsored_id": sponsored_id},
            )

        ctx.begin(sponsored_id, source)
        logger.debug(f"{source} begins sponsoring future reserves for {sponsored_id}")

    def end_sponsoring_future_reserves(self, ctx: SponsorshipContext, source: str) -> None:
        sponsor = ctx.sponsor_of(source)
        if sponsor is None:
            raise NotSponsored(f"{source} is not being sponsored", {"account_id": source})
        ctx.end(source)
        logger.debug(f"{sponsor} ends sponsoring future reserves for {source}")

    def check_no_open_sponsorships(self, ctx: SponsorshipContext) -> None:
        """Commit-time check: every Begin must have been matched by an End."""
        if len(ctx):
            open_rel = ctx.open_relationships()
            raise OpenSponsorshipAtCommit(
                f"{len(open_rel)} sponsorship(s) left open at commit",
                {"open": open_rel},
            )

    # --- entry lifecycle hooks ---
    def create_sponsored_entry(self, ctx: SponsorshipContext, owner_id: str, entry: SubEntry) -> SubEntry:
        """Charges a newly created sub-entry to its owner or the owner's active sponsor, then stores it."""
        owner = self.require_account(owner_id)
        weight = entry.reserve_weight()
        sponsor_id = ctx.sponsor_of(owner_id)

        if sponsor_id is not None:
            sponsor = self.require_account(sponsor_id)
            self._require_reserve(sponsor, weight)
            entry.sponsor = sponsor_id
            sponsor.num_sponsoring += weight
            owner.num_sponsored += weight
            self.state.set_account(sponsor)
        else:
            self._require_reserve(owner, weight)
            entry.sponsor = None

        owner.num_sub_entries += weight
        self.state.set_account(owner)
        self.state.set_entry(entry)
        logger.debug(f"Created {entry.kind.value} for {owner_id} (sponsor={entry.sponsor})")
        return entry

    def delete_sponsored_entry(self, entry: SubEntry) -> None:
        owner = self.require_account(entry.account_id)
        weight = entry.reserve_weight()

        if entry.sponsor is not None:
            sponsor = self.require_account(entry.sponsor)
            sponsor.num_sponsoring -= weight
            owner.num_sponsored -= weight
            self.state.set_account(sponsor)

        owner.num_sub_entries -= weight
        self.state.set_account(owner)
        self.state.delete_entry(entry.key())
        logger.debug(f"Deleted {entry.kind.value} of {entry.account_id} (sponsor={entry.sponsor})")

    def create_sponsored_account(self, ctx: SponsorshipContext, account: Account) -> Account:
        """Stores a new account entry, charged to its active sponsor if one is open."""
        weight = account.reserve_weight()
        sponsor_id = ctx.sponsor_of(account.account_id)

        if sponsor_id is not None:
            sponsor = self.require_account(sponsor_id)
            self._require_reserve(sponsor, weight)
            account.sponsor = sponsor_id
            account.num_sponsored += weight
            sponsor.num_sponsoring += weight
            self.state.set_account(sponsor)
        else:
            self._require_reserve(account, 0)

        self.state.set_account(account)
        return account

    def check_reserve(self, account_id: str, extra_reserves: int) -> None:
        self._require_reserve(self.require_account(account_id), extra_reserves)

    def claimable_balance_sponsor(self, ctx: SponsorshipContext, creator_id: str) -> str:
        """
        A claimable balance is always sponsored: by the creator's active
        sponsor if there is one, else by the creator itself.
        """
        return ctx.sponsor_of(creator_id) or creator_id

    def sponsor_claimable_balance(self, ctx: SponsorshipContext, creator_id: str, entry: ClaimableBalanceEntry) -> None:
        sponsor_id = self.claimable_balance_sponsor(ctx, creator_id)
        sponsor = self.require_account(sponsor_id)
        weight = entry.reserve_weight()
        self._require_reserve(sponsor, weight)

        entry.sponsor = sponsor_id
        sponsor.num_sponsoring += weight
        self.state.set_account(sponsor)

    def release_claimable_balance(self, entry: ClaimableBalanceEntry) -> None:
        sponsor = self.require_account(entry.sponsor)
        sponsor.num_sponsoring -= entry.reserve_weight()
        self.state.set_account(sponsor)

    # --- revoke ---
    def revoke_sponsorship(self, ctx: SponsorshipContext, source: str, target: LedgerKey) -> RevokeOutcome:
        """
        Transfers, removes or establishes the sponsorship of an existing entry.

        Cases, in order:
            1. sponsored,   source is being sponsored by S -> transfer to S
            2. sponsored,   source not being sponsored     -> remove
            3. unsponsored, source is being sponsored by S -> establish S
            4. unsponsored, source not being sponsored     -> no-op

        A sponsored entry may only be revoked by its current sponsor; an
        unsponsored one only by its owner. S equal to the owner means the
        owner takes the reserve back, which is a removal.
        """
        if target.kind not in SPONSORABLE_KINDS:
            raise NotSponsorable(f"{target.kind} entries cannot be sponsored")

        entry = self.state.load(target)
        if entry is None:
            raise EntryNotFound(f"No entry for {target.as_str()}", {"key": target.as_str()})

        owner_id = entry.owner_id
        weight = entry.reserve_weight()
        current = entry.sponsor

        if current is not None:
            if source != current:
                raise NotSponsor(f"{source} is not the sponsor of {target.as_str()}",
                                 {"source": source, "sponsor": current})
        elif source != owner_id:
            raise NotSponsor(f"{source} does not own {target.as_str()}",
                             {"source": source, "owner": owner_id})

        new_sponsor_id = ctx.sponsor_of(source)
        if new_sponsor_id == owner_id:
            new_sponsor_id = None

        if current is not None and new_sponsor_id is not None:
            old_sponsor = self.require_account(current)
            new_sponsor = self.require_account(new_sponsor_id)
            self._require_reserve(new_sponsor, weight)

            old_sponsor.num_sponsoring -= weight
            new_sponsor.num_sponsoring += weight
            entry.sponsor = new_sponsor_id
            self.state.set_account(old_sponsor)
            self.state.set_account(new_sponsor)
            outcome = RevokeOutcome.TRANSFERRED

        elif current is not None:
            if owner_id is None:
                raise OnlyTransferable("Claimable balance sponsorship can only be transferred",
                                       {"key": target.as_str()})
            old_sponsor = self.require_account(current)
            owner = self.require_account(owner_id)
            self._require_reserve(owner, weight)

            old_sponsor.num_sponsoring -= weight
            owner.num_sponsored -= weight
            entry.sponsor = None
            self.state.set_account(old_sponsor)
            self.state.set_account(owner)
            outcome = RevokeOutcome.REMOVED

        elif new_sponsor_id is not None:
            new_sponsor = self.require_account(new_sponsor_id)
            owner = self.require_account(owner_id)
            self._require_reserve(new_sponsor, weight)

            new_sponsor.num_sponsoring += weight
            owner.num_sponsored += weight
            entry.sponsor = new_sponsor_id
            self.state.set_account(new_sponsor)
            self.state.set_account(owner)
            outcome = RevokeOutcome.ESTABLISHED

        else:
            return RevokeOutcome.NO_OP

        self.state.store(entry)
        logger.info(f"Revoke {target.as_str()}: {outcome.value} ({current} -> {entry.sponsor})")
        return outcome

# MIT License
# Copyright (c) 2025 Hashborn

import logging
from typing import List

from .assets import AssetTransfer
from .predicates import ClaimContext, evaluate
from .sponsorship import SponsorshipContext, SponsorshipLedger
from .state import LedgerState
from ..observability import metrics
from ...protocol.config.params import LedgerConfig
from ...protocol.types.asset import Asset
from ...protocol.types.entry import Claimant, ClaimableBalanceEntry
from ...protocol.types.errors import (
    BalanceNotFound,
    MalformedOperation,
    NotClaimant,
    PredicateNotSatisfied,
)
from ...protocol.types.predicate import validate_predicate

logger = logging.getLogger(__name__)


class ClaimableBalances:
    def __init__(self, state: LedgerState, config: LedgerConfig,
                 sponsorship: SponsorshipLedger, transfer: AssetTransfer):
        self.state = state
        self.config = config
        self.sponsorship = sponsorship
        self.transfer = transfer

    def validate_claimants(self, claimants: List[Claimant]) -> None:
        if not claimants:
            raise MalformedOperation("At least one claimant is required")
        if len(claimants) > self.config.max_claimants:
            raise MalformedOperation(
                f"Too many claimants: {len(claimants)} > {self.config.max_claimants}"
            )
        destinations = [c.destination for c in claimants]
        if len(set(destinations)) != len(destinations):
            raise MalformedOperation("Duplicate claimant destinations")
        for claimant in claimants:
            validate_predicate(claimant.predicate, self.config.max_predicate_depth)

    def create_claimable_balance(self, ctx: SponsorshipContext, source: str, asset: Asset, amount: int,
                                 claimants: List[Claimant], balance_id: str,
                                 close_time: int) -> ClaimableBalanceEntry:
        """
        Moves `amount` of `asset` out of `source` into a new claimable balance.

        The balance reserve (one base reserve per claimant) is charged to
        the source, or to the source's active sponsor.

        Raises:
            MalformedOperation: bad amount, claimant list or predicate shape
            PredicateTooComplex: predicate deeper than the configured maximum
            LowReserve: sponsor cannot cover the reserve
            Underfunded / NoTrustline: source cannot pay `amount`
        """
        if amount <= 0:
            raise MalformedOperation(f"Amount must be positive, got {amount}")
        self.validate_claimants(claimants)
        if self.state.get_claimable_balance(balance_id) is not None:
            raise MalformedOperation(f"Claimable balance {balance_id} already exists")

        self.sponsorship.require_account(source)
        weight = len(claimants)
        sponsor_id = self.sponsorship.claimable_balance_sponsor(ctx, source)

        # Validate everything before mutating
        self.sponsorship.check_reserve(sponsor_id, weight)
        self.transfer.check_debit(source, asset, amount,
                                  extra_reserves=weight if sponsor_id == source else 0)

        entry = ClaimableBalanceEntry(
            balance_id=balance_id,
            asset=asset,
            amount=amount,
            claimants=list(claimants),
            created_time=close_time,
            sponsor=sponsor_id,
        )
        self.sponsorship.sponsor_claimable_balance(ctx, source, entry)
        self.transfer.debit(source, asset, amount)
        self.state.set_claimable_balance(entry)

        metrics.claimable_balances_created_total.inc()
        logger.info(f"Created claimable balance {balance_id[:16]}... {amount} {asset} "
                    f"for {len(claimants)} claimant(s), sponsor={sponsor_id}")
        return entry

    def claim_claimable_balance(self, claimant_id: str, balance_id: str, close_time: int) -> ClaimableBalanceEntry:
        """
        Releases a claimable balance to one of its claimants and deletes it.

        Raises:
            BalanceNotFound: no balance with this id
            NotClaimant: claimant_id is not listed on the balance
            PredicateNotSatisfied: the claimant's predicate is false now
            PredicateTooComplex: stored predicate deeper than the configured maximum
            NoTrustline / LineFull: claimant cannot receive the asset
        """
        entry = self.state.get_claimable_balance(balance_id)
        if entry is None:
            raise BalanceNotFound(f"Claimable balance {balance_id} not found", {"balance_id": balance_id})

        claimant = entry.find_claimant(claimant_id)
        if claimant is None:
            raise NotClaimant(f"{claimant_id} is not a claimant of {balance_id}",
                              {"balance_id": balance_id, "account_id": claimant_id})

        context = ClaimContext(current_close_time=close_time, entry_creation_time=entry.created_time)
        satisfied = evaluate(claimant.predicate, context, self.config.max_predicate_depth)
        metrics.predicate_evaluations_total.labels(outcome=str(satisfied).lower()).inc()
        if not satisfied:
            raise PredicateNotSatisfied(
                f"Predicate of {claimant_id} not satisfied at {close_time}",
                {"balance_id": balance_id, "close_time": close_time, "created_time": entry.created_time},
            )

        self.transfer.credit(claimant_id, entry.asset, entry.amount)
        self.sponsorship.release_claimable_balance(entry)
        self.state.delete_claimable_balance(balance_id)

        metrics.claimable_balances_claimed_total.inc()
        logger.info(f"Claimed {entry.amount} {entry.asset} from {balance_id[:16]}... by {claimant_id}")
        return entry

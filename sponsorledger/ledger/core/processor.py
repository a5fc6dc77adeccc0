# MIT License
# Copyright (c) 2025 Hashborn

import logging
import threading
from typing import List, Optional

from .assets import AssetTransfer
from .claimable import ClaimableBalances
from .entries import EntryOperations
from .sponsorship import SponsorshipContext, SponsorshipLedger
from .state import LedgerState
from .tx_result import OpResult, TxResult
from ..observability import metrics
from ..storage.db import StorageDB
from ...protocol.config.params import CURRENT_NETWORK, LedgerConfig
from ...protocol.crypto.hash import claimable_balance_id
from ...protocol.types.common import OperationType, ResultCode
from ...protocol.types.errors import (
    BadSequence,
    LedgerError,
    MalformedOperation,
    NoAccount,
    OpenSponsorshipAtCommit,
)
from ...protocol.types.tx import Transaction

logger = logging.getLogger(__name__)


class _Engines:
    """Rule engines bound to one (simulated) state."""

    def __init__(self, state: LedgerState, config: LedgerConfig):
        self.sponsorship = SponsorshipLedger(state, config)
        self.transfer = AssetTransfer(state, config)
        self.claims = ClaimableBalances(state, config, self.sponsorship, self.transfer)
        self.entries = EntryOperations(state, config, self.sponsorship, self.transfer)


class TransactionProcessor:
    """
    Applies transactions atomically.

    Operations run in order against a clone of the state with a fresh
    SponsorshipContext. The clone replaces the live state only if every
    operation succeeded and no sponsorship is left open; otherwise it is
    dropped and the live state is exactly what it was before.
    """

    def __init__(self, state: LedgerState, config: Optional[LedgerConfig] = None):
        self.state = state
        self.config = config or CURRENT_NETWORK
        self._lock = threading.RLock()

    @classmethod
    def open(cls, db_path: str, config: Optional[LedgerConfig] = None) -> 'TransactionProcessor':
        return cls(LedgerState(StorageDB(db_path)), config)

    def apply_transaction(self, tx: Transaction, close_time: int) -> TxResult:
        """
        Applies a transaction at ledger close time `close_time`.

        Only LedgerError is turned into a failed result; anything else is a
        bug and propagates.
        """
        tx_hash = tx.hash()
        with self._lock:
            tmp_state = self.state.clone()
            try:
                op_results = self._apply_operations(tmp_state, tx, close_time)
            except LedgerError as e:
                if isinstance(e, OpenSponsorshipAtCommit):
                    metrics.open_sponsorships_at_commit_total.inc(len(e.context.get("open", {})))
                metrics.update_transaction_metrics(e.code.value)
                logger.warning(f"Tx {tx_hash[:8]} failed: {e.code.value}: {e.message}")
                return TxResult(
                    tx_hash=tx_hash,
                    success=False,
                    code=e.code.value,
                    close_time=close_time,
                    failed_op_index=e.context.get("op_index"),
                    error=e.message,
                )

            # Apply Real
            self.state = tmp_state
            self.state.persist()

        metrics.update_transaction_metrics(ResultCode.SUCCESS.value)
        metrics.update_state_metrics(self.state)
        logger.info(f"Tx {tx_hash[:8]} applied: {len(op_results)} operation(s) at {close_time}")
        return TxResult(
            tx_hash=tx_hash,
            success=True,
            code=ResultCode.SUCCESS.value,
            close_time=close_time,
            op_results=op_results,
        )

    def _apply_operations(self, state: LedgerState, tx: Transaction, close_time: int) -> List[OpResult]:
        if not tx.operations:
            raise MalformedOperation("Transaction has no operations")

        source = state.get_account(tx.source_account)
        if source is None:
            raise NoAccount(f"Source account {tx.source_account} does not exist",
                            {"account_id": tx.source_account})
        if tx.seq_num != source.seq_num + 1:
            raise BadSequence(f"Invalid sequence: expected {source.seq_num + 1}, got {tx.seq_num}",
                              {"expected": source.seq_num + 1, "got": tx.seq_num})

        engines = _Engines(state, self.config)
        ctx = SponsorshipContext()
        results = []

        for index, op in enumerate(tx.operations):
            try:
                result = self._apply_operation(engines, ctx, tx, index, close_time)
            except LedgerError as e:
                e.context.setdefault("op_index", index)
                metrics.update_operation_metrics(op.type.value, e.code.value)
                raise
            metrics.update_operation_metrics(op.type.value, ResultCode.SUCCESS.value)
            results.append(result)

        engines.sponsorship.check_no_open_sponsorships(ctx)

        source = state.get_account(tx.source_account)
        source.seq_num = tx.seq_num
        state.set_account(source)
        return results

    def _apply_operation(self, engines: _Engines, ctx: SponsorshipContext, tx: Transaction,
                         index: int, close_time: int) -> OpResult:
        op = tx.operations[index]
        source = tx.op_source(index)
        engines.sponsorship.require_account(source)
        result = OpResult(op_type=op.type.value)

        # Route by Type
        if op.type == OperationType.BEGIN_SPONSORING_FUTURE_RESERVES:
            engines.sponsorship.begin_sponsoring_future_reserves(ctx, source, op.sponsored_id)

        elif op.type == OperationType.END_SPONSORING_FUTURE_RESERVES:
            engines.sponsorship.end_sponsoring_future_reserves(ctx, source)

        elif op.type == OperationType.REVOKE_SPONSORSHIP:
            outcome = engines.sponsorship.revoke_sponsorship(ctx, source, op.target)
            result.details["outcome"] = outcome.value

        elif op.type == OperationType.CREATE_CLAIMABLE_BALANCE:
            balance_id = claimable_balance_id(
                self.config.network_passphrase, tx.source_account, tx.seq_num, index
            )
            engines.claims.create_claimable_balance(
                ctx, source, op.asset, op.amount, op.claimants, balance_id, close_time
            )
            result.details["balance_id"] = balance_id

        elif op.type == OperationType.CLAIM_CLAIMABLE_BALANCE:
            entry = engines.claims.claim_claimable_balance(source, op.balance_id, close_time)
            result.details["amount"] = entry.amount

        elif op.type == OperationType.CREATE_ACCOUNT:
            engines.entries.create_account(ctx, source, op.destination, op.starting_balance)

        elif op.type == OperationType.CHANGE_TRUST:
            engines.entries.change_trust(ctx, source, op.asset, op.limit)

        elif op.type == OperationType.MANAGE_DATA:
            engines.entries.manage_data(ctx, source, op.name, op.value)

        elif op.type == OperationType.SET_SIGNER:
            engines.entries.set_signer(ctx, source, op.signer_key, op.weight)

        elif op.type == OperationType.MANAGE_OFFER:
            engines.entries.manage_offer(ctx, source, op.offer_id, op.selling, op.buying, op.amount)

        else:
            raise MalformedOperation(f"Unknown operation type: {op.type}")

        return result

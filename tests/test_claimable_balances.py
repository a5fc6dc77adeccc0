"""
Claimable Balance Tests

Tests create / claim through the transaction processor:
- Relative time claim window
- Double claim, wrong claimant
- Trustline checks on claim (NoTrustline / LineFull)
- Reserve sponsorship of the balance entry
"""

import os
import shutil

import pytest

from sponsorledger.ledger.core.accounts import Account
from sponsorledger.ledger.core.processor import TransactionProcessor
from sponsorledger.protocol.config.params import LedgerConfig
from sponsorledger.protocol.crypto.hash import claimable_balance_id
from sponsorledger.protocol.types.asset import Asset
from sponsorledger.protocol.types.common import ResultCode
from sponsorledger.protocol.types.entry import Claimant, LedgerKey
from sponsorledger.protocol.types.predicate import (
    before_relative_time,
    not_,
    unconditional,
)
from sponsorledger.protocol.types.tx import (
    BeginSponsoringFutureReserves,
    ChangeTrust,
    ClaimClaimableBalance,
    CreateClaimableBalance,
    EndSponsoringFutureReserves,
    RevokeSponsorship,
    Transaction,
)

TEST_DB_DIR = "./test_claims_db"
BASE_RESERVE = 100

CONFIG = LedgerConfig(network_id="test", network_passphrase="Test Network", base_reserve=BASE_RESERVE)

USD = Asset.credit("USD", "ISSUER")


# ═══════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════

@pytest.fixture
def processor():
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)
    os.makedirs(TEST_DB_DIR)

    proc = TransactionProcessor.open(os.path.join(TEST_DB_DIR, "ledger.db"), CONFIG)
    for account_id in ("A", "B", "C", "ISSUER"):
        proc.state.set_account(Account(account_id=account_id, balance=100_000))
    proc.state.persist()
    yield proc

    proc.state.db.close()
    if os.path.exists(TEST_DB_DIR):
        shutil.rmtree(TEST_DB_DIR)


def submit(proc, source, *operations, close_time=1000):
    seq = proc.state.get_account(source).seq_num + 1
    tx = Transaction(source_account=source, seq_num=seq, operations=list(operations))
    return proc.apply_transaction(tx, close_time)


def create_balance(proc, source, claimants, amount=1000, asset=None, close_time=1000):
    result = submit(
        proc, source,
        CreateClaimableBalance(asset=asset or Asset.native(), amount=amount, claimants=claimants),
        close_time=close_time,
    )
    assert result.success, result.error
    return result.op_results[0].details["balance_id"]


def claim(proc, claimant, balance_id, close_time):
    return submit(proc, claimant, ClaimClaimableBalance(balance_id=balance_id), close_time=close_time)


def balance_of(proc, account_id):
    return proc.state.get_account(account_id).balance


# ═══════════════════════════════════════════════════════════════════
# CREATE
# ═══════════════════════════════════════════════════════════════════

def test_create_moves_funds_and_reserves(processor):
    balance_id = create_balance(
        processor, "A",
        [Claimant(destination="B", predicate=unconditional()),
         Claimant(destination="C", predicate=unconditional())],
        amount=1000,
    )

    entry = processor.state.get_claimable_balance(balance_id)
    assert entry.amount == 1000
    assert entry.created_time == 1000
    assert entry.sponsor == "A"

    a = processor.state.get_account("A")
    assert a.balance == 100_000 - 1000
    assert a.num_sponsoring == 2          # One reserve per claimant
    assert a.num_sub_entries == 0         # Never a sub-entry
    assert a.num_sponsored == 0


def test_balance_id_is_derived_from_operation(processor):
    balance_id = create_balance(processor, "A", [Claimant(destination="B", predicate=unconditional())])
    assert balance_id == claimable_balance_id("Test Network", "A", 1, 0)
    assert balance_id.startswith("00000000")


def test_two_balances_in_one_transaction_get_distinct_ids(processor):
    claimants = [Claimant(destination="B", predicate=unconditional())]
    result = submit(
        processor, "A",
        CreateClaimableBalance(asset=Asset.native(), amount=10, claimants=claimants),
        CreateClaimableBalance(asset=Asset.native(), amount=20, claimants=claimants),
    )
    assert result.success
    ids = [r.details["balance_id"] for r in result.op_results]
    assert len(set(ids)) == 2


@pytest.mark.parametrize("amount,claimants", [
    (0, [Claimant(destination="B", predicate=unconditional())]),
    (-5, [Claimant(destination="B", predicate=unconditional())]),
    (10, []),
    (10, [Claimant(destination="B", predicate=unconditional()),
          Claimant(destination="B", predicate=unconditional())]),
    (10, [Claimant(destination=f"X{i}", predicate=unconditional()) for i in range(11)]),
])
def test_create_malformed(processor, amount, claimants):
    result = submit(processor, "A", CreateClaimableBalance(asset=Asset.native(), amount=amount, claimants=claimants))
    assert not result.success
    assert result.code == ResultCode.MALFORMED.value
    assert balance_of(processor, "A") == 100_000


def test_create_with_too_deep_predicate(processor):
    deep = not_(not_(not_(not_(unconditional()))))
    result = submit(
        processor, "A",
        CreateClaimableBalance(asset=Asset.native(), amount=10,
                               claimants=[Claimant(destination="B", predicate=deep)]),
    )
    assert result.code == ResultCode.PREDICATE_TOO_COMPLEX.value


def test_create_underfunded(processor):
    result = submit(
        processor, "A",
        CreateClaimableBalance(asset=Asset.native(), amount=100_000,
                               claimants=[Claimant(destination="B", predicate=unconditional())]),
    )
    assert result.code == ResultCode.UNDERFUNDED.value
    assert processor.state.get_account("A").num_sponsoring == 0


def test_create_credit_asset_needs_trustline(processor):
    result = submit(
        processor, "A",
        CreateClaimableBalance(asset=USD, amount=10,
                               claimants=[Claimant(destination="B", predicate=unconditional())]),
    )
    assert result.code == ResultCode.NO_TRUSTLINE.value


def test_issuer_creates_balance_of_own_asset(processor):
    balance_id = create_balance(
        processor, "ISSUER", [Claimant(destination="B", predicate=unconditional())], amount=500, asset=USD
    )
    assert balance_of(processor, "ISSUER") == 100_000

    assert submit(processor, "B", ChangeTrust(asset=USD, limit=1000)).success
    result = claim(processor, "B", balance_id, close_time=1001)
    assert result.success
    assert processor.state.get_entry(LedgerKey.trustline("B", USD)).balance == 500


# ═══════════════════════════════════════════════════════════════════
# CLAIM
# ═══════════════════════════════════════════════════════════════════

def test_claim_within_relative_window(processor):
    balance_id = create_balance(
        processor, "A", [Claimant(destination="B", predicate=before_relative_time(60))], close_time=1000
    )

    result = claim(processor, "B", balance_id, close_time=1059)

    assert result.success
    assert balance_of(processor, "B") == 100_000 + 1000
    assert processor.state.get_claimable_balance(balance_id) is None
    assert processor.state.get_account("A").num_sponsoring == 0


def test_claim_after_relative_window_fails(processor):
    balance_id = create_balance(
        processor, "A", [Claimant(destination="B", predicate=before_relative_time(60))], close_time=1000
    )

    result = claim(processor, "B", balance_id, close_time=1061)

    assert not result.success
    assert result.code == ResultCode.PREDICATE_NOT_SATISFIED.value
    assert result.failed_op_index == 0
    assert processor.state.get_claimable_balance(balance_id) is not None
    assert balance_of(processor, "B") == 100_000


def test_second_claim_fails_balance_not_found(processor):
    balance_id = create_balance(processor, "A", [Claimant(destination="B", predicate=unconditional())])

    assert claim(processor, "B", balance_id, close_time=1001).success
    result = claim(processor, "B", balance_id, close_time=1002)

    assert result.code == ResultCode.BALANCE_NOT_FOUND.value


def test_claim_by_non_claimant(processor):
    balance_id = create_balance(processor, "A", [Claimant(destination="B", predicate=unconditional())])
    result = claim(processor, "C", balance_id, close_time=1001)
    assert result.code == ResultCode.NOT_CLAIMANT.value


def test_claimant_predicates_are_independent(processor):
    balance_id = create_balance(
        processor, "A",
        [Claimant(destination="B", predicate=before_relative_time(10)),
         Claimant(destination="C", predicate=not_(before_relative_time(10)))],
        close_time=1000,
    )
    assert claim(processor, "C", balance_id, close_time=1005).code == ResultCode.PREDICATE_NOT_SATISFIED.value
    assert claim(processor, "B", balance_id, close_time=1005).success


def test_claim_credit_asset_without_trustline(processor):
    assert submit(processor, "A", ChangeTrust(asset=USD, limit=10_000)).success
    processor.state.get_entry(LedgerKey.trustline("A", USD)).balance = 5000
    balance_id = create_balance(
        processor, "A", [Claimant(destination="B", predicate=unconditional())], amount=1000, asset=USD
    )

    result = claim(processor, "B", balance_id, close_time=1001)
    assert result.code == ResultCode.NO_TRUSTLINE.value


def test_claim_credit_asset_over_limit(processor):
    assert submit(processor, "A", ChangeTrust(asset=USD, limit=10_000)).success
    processor.state.get_entry(LedgerKey.trustline("A", USD)).balance = 5000
    balance_id = create_balance(
        processor, "A", [Claimant(destination="B", predicate=unconditional())], amount=1000, asset=USD
    )
    assert processor.state.get_entry(LedgerKey.trustline("A", USD)).balance == 4000

    assert submit(processor, "B", ChangeTrust(asset=USD, limit=500)).success
    assert claim(processor, "B", balance_id, close_time=1001).code == ResultCode.LINE_FULL.value

    assert submit(processor, "B", ChangeTrust(asset=USD, limit=1000)).success
    assert claim(processor, "B", balance_id, close_time=1002).success
    assert processor.state.get_entry(LedgerKey.trustline("B", USD)).balance == 1000


# ═══════════════════════════════════════════════════════════════════
# SPONSORSHIP OF BALANCES
# ═══════════════════════════════════════════════════════════════════

def test_balance_created_under_sponsorship(processor):
    claimants = [Claimant(destination="C", predicate=unconditional())]
    result = submit(
        processor, "A",
        BeginSponsoringFutureReserves(sponsored_id="B"),
        CreateClaimableBalance(source_account="B", asset=Asset.native(), amount=50, claimants=claimants),
        EndSponsoringFutureReserves(source_account="B"),
    )
    assert result.success
    balance_id = result.op_results[1].details["balance_id"]

    assert processor.state.get_claimable_balance(balance_id).sponsor == "A"
    assert processor.state.get_account("A").num_sponsoring == 1
    b = processor.state.get_account("B")
    assert (b.num_sponsoring, b.num_sponsored, b.balance) == (0, 0, 100_000 - 50)

    assert claim(processor, "C", balance_id, close_time=1001).success
    assert processor.state.get_account("A").num_sponsoring == 0


def test_transfer_balance_sponsorship(processor):
    balance_id = create_balance(processor, "A", [Claimant(destination="B", predicate=unconditional())])

    result = submit(
        processor, "C",
        BeginSponsoringFutureReserves(sponsored_id="A"),
        RevokeSponsorship(source_account="A", target=LedgerKey.claimable_balance(balance_id)),
        EndSponsoringFutureReserves(source_account="A"),
    )

    assert result.success
    assert result.op_results[1].details["outcome"] == "TRANSFERRED"
    assert processor.state.get_claimable_balance(balance_id).sponsor == "C"
    assert processor.state.get_account("A").num_sponsoring == 0
    assert processor.state.get_account("C").num_sponsoring == 1


def test_remove_balance_sponsorship_fails(processor):
    balance_id = create_balance(processor, "A", [Claimant(destination="B", predicate=unconditional())])
    result = submit(processor, "A", RevokeSponsorship(target=LedgerKey.claimable_balance(balance_id)))
    assert result.code == ResultCode.ONLY_TRANSFERABLE.value

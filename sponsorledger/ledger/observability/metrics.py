# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics Exporter

Metrics:
- Operations and transactions applied, by type and result code
- Claimable balances created / claimed, predicate outcomes
- Sponsorships left open at commit
- Ledger gauges (accounts, sponsored reserves, open claimable balances)
"""

from prometheus_client import Counter, Gauge, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# OPERATION METRICS
# ═══════════════════════════════════════════════════════════════════

operations_total = Counter(
    'sponsorledger_operations_total',
    'Total number of operations applied',
    ['op_type', 'result'],
    registry=metrics_registry
)

transactions_total = Counter(
    'sponsorledger_transactions_total',
    'Total number of transactions applied',
    ['result'],
    registry=metrics_registry
)

open_sponsorships_at_commit_total = Counter(
    'sponsorledger_open_sponsorships_at_commit_total',
    'Sponsorship relationships found open at transaction commit',
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# CLAIMABLE BALANCE METRICS
# ═══════════════════════════════════════════════════════════════════

claimable_balances_created_total = Counter(
    'sponsorledger_claimable_balances_created_total',
    'Total number of claimable balances created',
    registry=metrics_registry
)

claimable_balances_claimed_total = Counter(
    'sponsorledger_claimable_balances_claimed_total',
    'Total number of claimable balances claimed',
    registry=metrics_registry
)

predicate_evaluations_total = Counter(
    'sponsorledger_predicate_evaluations_total',
    'Claim predicate evaluations by outcome',
    ['outcome'],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# STATE METRICS
# ═══════════════════════════════════════════════════════════════════

accounts_total = Gauge(
    'sponsorledger_accounts_total',
    'Number of accounts in the ledger',
    registry=metrics_registry
)

sponsored_reserves_total = Gauge(
    'sponsorledger_sponsored_reserves_total',
    'Sum of num_sponsored over all accounts',
    registry=metrics_registry
)

claimable_balances_open = Gauge(
    'sponsorledger_claimable_balances_open',
    'Number of unclaimed claimable balances',
    registry=metrics_registry
)


# ═══════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def update_operation_metrics(op_type: str, result: str):
    operations_total.labels(op_type=op_type, result=result).inc()


def update_transaction_metrics(result: str):
    transactions_total.labels(result=result).inc()


def update_state_metrics(state):
    """
    Update gauges from ledger state.
    Only updates Gauges, not Counters.

    Args:
        state: LedgerState instance
    """
    accounts = state.all_accounts()
    accounts_total.set(len(accounts))
    sponsored_reserves_total.set(sum(acc.num_sponsored for acc in accounts))
    claimable_balances_open.set(len(state.all_claimable_balances()))

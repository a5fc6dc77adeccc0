import pytest
from pydantic import ValidationError

from sponsorledger.ledger.core.predicates import ClaimContext, evaluate
from sponsorledger.protocol.types.common import PredicateType
from sponsorledger.protocol.types.errors import MalformedOperation, PredicateTooComplex
from sponsorledger.protocol.types.predicate import (
    ClaimPredicate,
    and_,
    before_absolute_time,
    before_relative_time,
    check_depth,
    not_,
    or_,
    unconditional,
    validate_predicate,
)

MAX_DEPTH = 4


def ctx(close_time, created_time=0):
    return ClaimContext(current_close_time=close_time, entry_creation_time=created_time)


def test_unconditional():
    assert evaluate(unconditional(), ctx(0), MAX_DEPTH) is True
    assert evaluate(unconditional(), ctx(10**12), MAX_DEPTH) is True


def test_before_absolute_time():
    pred = before_absolute_time(1000)
    assert evaluate(pred, ctx(999), MAX_DEPTH) is True
    assert evaluate(pred, ctx(1000), MAX_DEPTH) is False
    assert evaluate(pred, ctx(1001), MAX_DEPTH) is False


def test_before_relative_time_window():
    pred = before_relative_time(60)
    assert evaluate(pred, ctx(1059, created_time=1000), MAX_DEPTH) is True
    assert evaluate(pred, ctx(1060, created_time=1000), MAX_DEPTH) is False
    assert evaluate(pred, ctx(1061, created_time=1000), MAX_DEPTH) is False


def test_not():
    assert evaluate(not_(unconditional()), ctx(0), MAX_DEPTH) is False
    assert evaluate(not_(before_absolute_time(100)), ctx(100), MAX_DEPTH) is True


def test_and_or():
    t, f = unconditional(), not_(unconditional())
    assert evaluate(and_(t, t), ctx(0), MAX_DEPTH) is True
    assert evaluate(and_(t, f), ctx(0), MAX_DEPTH) is False
    assert evaluate(or_(f, t), ctx(0), MAX_DEPTH) is True
    assert evaluate(or_(f, f), ctx(0), MAX_DEPTH) is False


@pytest.mark.parametrize("close_time,expected", [
    (1500, True),    # Y < close < X
    (500, False),    # close < Y
    (2000, False),   # close >= X
    (2500, False),
])
def test_claim_window_between_two_absolute_times(close_time, expected):
    x, y = 2000, 1000
    pred = and_(before_absolute_time(x), not_(before_absolute_time(y)))
    assert evaluate(pred, ctx(close_time), MAX_DEPTH) is expected


def test_evaluate_uses_configured_depth_by_default():
    assert evaluate(unconditional(), ctx(0)) is True


def test_depth_limit():
    ok = not_(not_(not_(unconditional())))
    assert check_depth(ok, MAX_DEPTH) == 4
    assert evaluate(ok, ctx(0), MAX_DEPTH) is False

    too_deep = not_(ok)
    with pytest.raises(PredicateTooComplex):
        evaluate(too_deep, ctx(0), MAX_DEPTH)
    with pytest.raises(PredicateTooComplex):
        validate_predicate(too_deep, MAX_DEPTH)


def test_depth_counts_deepest_branch():
    pred = and_(unconditional(), or_(unconditional(), not_(unconditional())))
    assert check_depth(pred, MAX_DEPTH) == 4
    with pytest.raises(PredicateTooComplex):
        check_depth(pred, 3)


def test_very_deep_tree_rejected_without_recursion():
    pred = unconditional()
    for _ in range(5000):
        pred = ClaimPredicate(type=PredicateType.NOT, predicates=(pred,))
    with pytest.raises(PredicateTooComplex):
        evaluate(pred, ctx(0), MAX_DEPTH)


@pytest.mark.parametrize("pred", [
    ClaimPredicate(type=PredicateType.AND, predicates=(unconditional(),)),
    ClaimPredicate(type=PredicateType.OR, predicates=()),
    ClaimPredicate(type=PredicateType.NOT, predicates=(unconditional(), unconditional())),
    ClaimPredicate(type=PredicateType.UNCONDITIONAL, predicates=(unconditional(),)),
    ClaimPredicate(type=PredicateType.BEFORE_ABSOLUTE_TIME),
    before_absolute_time(-1),
    before_relative_time(-5),
    ClaimPredicate(type=PredicateType.AND, predicates=(unconditional(), unconditional()), abs_before=10),
    ClaimPredicate(type=PredicateType.UNCONDITIONAL, rel_before=10),
    ClaimPredicate(type=PredicateType.BEFORE_ABSOLUTE_TIME, abs_before=10, rel_before=10),
    ClaimPredicate(type=PredicateType.BEFORE_RELATIVE_TIME, rel_before=10, abs_before=10),
    not_(ClaimPredicate(type=PredicateType.NOT, predicates=(unconditional(),), rel_before=5)),
])
def test_malformed_predicates(pred):
    with pytest.raises(MalformedOperation):
        validate_predicate(pred, MAX_DEPTH)


def test_predicates_are_immutable():
    pred = before_absolute_time(100)
    with pytest.raises(ValidationError):
        pred.abs_before = 200


def test_predicate_json_round_trip():
    pred = and_(before_relative_time(60), not_(before_absolute_time(10)))
    restored = ClaimPredicate.model_validate_json(pred.model_dump_json())
    assert restored == pred
    assert evaluate(restored, ctx(1001, created_time=1000), MAX_DEPTH) is True

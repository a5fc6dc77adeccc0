# MIT License
# Copyright (c) 2025 Hashborn

import logging
from dataclasses import dataclass
from typing import Optional

from ...protocol.config.params import CURRENT_NETWORK
from ...protocol.types.common import PredicateType
from ...protocol.types.predicate import ClaimPredicate, validate_predicate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimContext:
    """Inputs to predicate evaluation at claim time."""
    current_close_time: int     # Close time of the ledger applying the claim
    entry_creation_time: int    # Close time of the ledger that created the balance


def evaluate(predicate: ClaimPredicate, context: ClaimContext, max_depth: Optional[int] = None) -> bool:
    """
    Evaluates a claim predicate. Pure.

    The tree is validated up front so the recursive walk below never goes
    deeper than max_depth.

    Raises:
        PredicateTooComplex: tree deeper than max_depth
        MalformedOperation: wrong child count or missing time bound
    """
    if max_depth is None:
        max_depth = CURRENT_NETWORK.max_predicate_depth
    validate_predicate(predicate, max_depth)
    result = _evaluate(predicate, context)
    logger.debug(f"Predicate {predicate.type.value} at {context.current_close_time} -> {result}")
    return result


def _evaluate(predicate: ClaimPredicate, ctx: ClaimContext) -> bool:
    ptype = predicate.type

    if ptype == PredicateType.UNCONDITIONAL:
        return True
    if ptype == PredicateType.BEFORE_RELATIVE_TIME:
        return ctx.current_close_time < ctx.entry_creation_time + predicate.rel_before
    if ptype == PredicateType.BEFORE_ABSOLUTE_TIME:
        return ctx.current_close_time < predicate.abs_before
    if ptype == PredicateType.NOT:
        return not _evaluate(predicate.predicates[0], ctx)
    if ptype == PredicateType.AND:
        left, right = predicate.predicates
        return _evaluate(left, ctx) and _evaluate(right, ctx)
    if ptype == PredicateType.OR:
        left, right = predicate.predicates
        return _evaluate(left, ctx) or _evaluate(right, ctx)

    raise ValueError(f"Unknown predicate type: {ptype}")

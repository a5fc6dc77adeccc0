# MIT License
# Copyright (c) 2025 Hashborn

"""
Claim predicates.

A predicate is an immutable tree. Leaves are UNCONDITIONAL,
BEFORE_ABSOLUTE_TIME (unix seconds) and BEFORE_RELATIVE_TIME (seconds
after the balance was created). Inner nodes are AND / OR (two children)
and NOT (one child).

Construction does not enforce shape; `validate_predicate` does, so a
malformed tree decoded from storage or from a submitted operation is
rejected with a result code instead of a pydantic error.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .common import PredicateType
from .errors import MalformedOperation, PredicateTooComplex


class ClaimPredicate(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: PredicateType
    predicates: Tuple["ClaimPredicate", ...] = ()
    abs_before: Optional[int] = None   # BEFORE_ABSOLUTE_TIME
    rel_before: Optional[int] = None   # BEFORE_RELATIVE_TIME


ClaimPredicate.model_rebuild()


def unconditional() -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.UNCONDITIONAL)

def and_(left: ClaimPredicate, right: ClaimPredicate) -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.AND, predicates=(left, right))

def or_(left: ClaimPredicate, right: ClaimPredicate) -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.OR, predicates=(left, right))

def not_(inner: ClaimPredicate) -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.NOT, predicates=(inner,))

def before_absolute_time(timestamp: int) -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.BEFORE_ABSOLUTE_TIME, abs_before=timestamp)

def before_relative_time(seconds: int) -> ClaimPredicate:
    return ClaimPredicate(type=PredicateType.BEFORE_RELATIVE_TIME, rel_before=seconds)


_ARITY = {
    PredicateType.UNCONDITIONAL: 0,
    PredicateType.BEFORE_ABSOLUTE_TIME: 0,
    PredicateType.BEFORE_RELATIVE_TIME: 0,
    PredicateType.NOT: 1,
    PredicateType.AND: 2,
    PredicateType.OR: 2,
}


def check_depth(predicate: ClaimPredicate, max_depth: int) -> int:
    """
    Returns the depth of the tree (a single leaf has depth 1).

    Walks iteratively and stops as soon as a node deeper than `max_depth`
    is seen, so an oversized tree costs at most `max_depth` levels of work
    per branch before PredicateTooComplex is raised.
    """
    deepest = 0
    stack: List[Tuple[ClaimPredicate, int]] = [(predicate, 1)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            raise PredicateTooComplex(
                f"Predicate depth exceeds {max_depth}",
                {"max_depth": max_depth},
            )
        deepest = max(deepest, depth)
        for child in node.predicates:
            stack.append((child, depth + 1))
    return deepest


def validate_predicate(predicate: ClaimPredicate, max_depth: int) -> None:
    """
    Structural validation of a predicate tree.

    Raises:
        PredicateTooComplex: tree deeper than max_depth
        MalformedOperation: wrong child count, missing or negative time bound,
            or a time bound on a node type that does not use it
    """
    check_depth(predicate, max_depth)

    stack = [predicate]
    while stack:
        node = stack.pop()
        arity = _ARITY[node.type]
        if len(node.predicates) != arity:
            raise MalformedOperation(
                f"{node.type.value} predicate needs {arity} children, got {len(node.predicates)}"
            )
        if node.type == PredicateType.BEFORE_ABSOLUTE_TIME:
            if node.abs_before is None or node.abs_before < 0:
                raise MalformedOperation("BEFORE_ABSOLUTE_TIME needs a non-negative timestamp")
        elif node.abs_before is not None:
            raise MalformedOperation(f"{node.type.value} predicate cannot carry abs_before")
        if node.type == PredicateType.BEFORE_RELATIVE_TIME:
            if node.rel_before is None or node.rel_before < 0:
                raise MalformedOperation("BEFORE_RELATIVE_TIME needs a non-negative duration")
        elif node.rel_before is not None:
            raise MalformedOperation(f"{node.type.value} predicate cannot carry rel_before")
        stack.extend(node.predicates)

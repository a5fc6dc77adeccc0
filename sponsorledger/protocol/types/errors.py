# MIT License
# Copyright (c) 2025 Hashborn

"""
Ledger operation errors.

Every error maps to a stable ResultCode that the enclosing pipeline reports
back to the submitter. None of them are retriable: a failed operation fails
its whole transaction.

Hierarchy:

    ProtocolError
    └── LedgerError
        ├── sponsorship: AlreadySponsored, NotSponsored, RecursiveSponsorship,
        │   OpenSponsorshipAtCommit, NotSponsorable, NotSponsor,
        │   OnlyTransferable, EntryNotFound, LowReserve
        ├── claims: BalanceNotFound, NotClaimant, PredicateNotSatisfied,
        │   PredicateTooComplex
        ├── asset transfer: LineFull, NoTrustline, Underfunded
        └── general: MalformedOperation, NoAccount, AccountAlreadyExists,
            BadSequence
"""

from typing import Any, Dict, Optional

from .common import ProtocolError, ResultCode


class LedgerError(ProtocolError):
    code: ResultCode = ResultCode.MALFORMED

    def __init__(self, message: str = "", context: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.code.value)
        self.message = message or self.code.value
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "context": dict(self.context),
        }


# --- Sponsorship ---

class AlreadySponsored(LedgerError):
    code = ResultCode.ALREADY_SPONSORED


class NotSponsored(LedgerError):
    code = ResultCode.NOT_SPONSORED


class RecursiveSponsorship(LedgerError):
    code = ResultCode.RECURSIVE_SPONSORSHIP


class OpenSponsorshipAtCommit(LedgerError):
    code = ResultCode.OPEN_SPONSORSHIP_AT_COMMIT


class NotSponsorable(LedgerError):
    code = ResultCode.NOT_SPONSORABLE


class NotSponsor(LedgerError):
    code = ResultCode.NOT_SPONSOR


class OnlyTransferable(LedgerError):
    code = ResultCode.ONLY_TRANSFERABLE


class EntryNotFound(LedgerError):
    code = ResultCode.ENTRY_NOT_FOUND


class LowReserve(LedgerError):
    code = ResultCode.LOW_RESERVE


# --- Claimable balances ---

class BalanceNotFound(LedgerError):
    code = ResultCode.BALANCE_NOT_FOUND


class NotClaimant(LedgerError):
    code = ResultCode.NOT_CLAIMANT


class PredicateNotSatisfied(LedgerError):
    code = ResultCode.PREDICATE_NOT_SATISFIED


class PredicateTooComplex(LedgerError):
    code = ResultCode.PREDICATE_TOO_COMPLEX


# --- Asset transfer ---

class LineFull(LedgerError):
    code = ResultCode.LINE_FULL


class NoTrustline(LedgerError):
    code = ResultCode.NO_TRUSTLINE


class Underfunded(LedgerError):
    code = ResultCode.UNDERFUNDED


# --- General ---

class MalformedOperation(LedgerError):
    code = ResultCode.MALFORMED


class NoAccount(LedgerError):
    code = ResultCode.NO_ACCOUNT


class AccountAlreadyExists(LedgerError):
    code = ResultCode.ACCOUNT_ALREADY_EXISTS


class BadSequence(LedgerError):
    code = ResultCode.BAD_SEQUENCE

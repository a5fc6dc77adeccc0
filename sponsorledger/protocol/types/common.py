# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum


class OperationType(str, Enum):
    # Sponsorship
    BEGIN_SPONSORING_FUTURE_RESERVES = "BEGIN_SPONSORING_FUTURE_RESERVES"
    END_SPONSORING_FUTURE_RESERVES = "END_SPONSORING_FUTURE_RESERVES"
    REVOKE_SPONSORSHIP = "REVOKE_SPONSORSHIP"

    # Claimable balances
    CREATE_CLAIMABLE_BALANCE = "CREATE_CLAIMABLE_BALANCE"
    CLAIM_CLAIMABLE_BALANCE = "CLAIM_CLAIMABLE_BALANCE"

    # Entry-creating operations (sponsorable)
    CREATE_ACCOUNT = "CREATE_ACCOUNT"
    CHANGE_TRUST = "CHANGE_TRUST"
    MANAGE_DATA = "MANAGE_DATA"
    SET_SIGNER = "SET_SIGNER"
    MANAGE_OFFER = "MANAGE_OFFER"


class EntryKind(str, Enum):
    ACCOUNT = "ACCOUNT"
    TRUSTLINE = "TRUSTLINE"
    OFFER = "OFFER"
    DATA = "DATA"
    SIGNER = "SIGNER"
    CLAIMABLE_BALANCE = "CLAIMABLE_BALANCE"


SPONSORABLE_KINDS = frozenset(EntryKind)


class PredicateType(str, Enum):
    UNCONDITIONAL = "UNCONDITIONAL"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    BEFORE_ABSOLUTE_TIME = "BEFORE_ABSOLUTE_TIME"
    BEFORE_RELATIVE_TIME = "BEFORE_RELATIVE_TIME"


class ResultCode(str, Enum):
    SUCCESS = "SUCCESS"

    # Sponsorship
    ALREADY_SPONSORED = "ALREADY_SPONSORED"
    NOT_SPONSORED = "NOT_SPONSORED"
    RECURSIVE_SPONSORSHIP = "RECURSIVE_SPONSORSHIP"
    OPEN_SPONSORSHIP_AT_COMMIT = "OPEN_SPONSORSHIP_AT_COMMIT"
    NOT_SPONSORABLE = "NOT_SPONSORABLE"
    NOT_SPONSOR = "NOT_SPONSOR"
    ONLY_TRANSFERABLE = "ONLY_TRANSFERABLE"
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    LOW_RESERVE = "LOW_RESERVE"

    # Claimable balances
    BALANCE_NOT_FOUND = "BALANCE_NOT_FOUND"
    NOT_CLAIMANT = "NOT_CLAIMANT"
    PREDICATE_NOT_SATISFIED = "PREDICATE_NOT_SATISFIED"
    PREDICATE_TOO_COMPLEX = "PREDICATE_TOO_COMPLEX"

    # Asset transfer
    LINE_FULL = "LINE_FULL"
    NO_TRUSTLINE = "NO_TRUSTLINE"
    UNDERFUNDED = "UNDERFUNDED"

    # General
    MALFORMED = "MALFORMED"
    NO_ACCOUNT = "NO_ACCOUNT"
    ACCOUNT_ALREADY_EXISTS = "ACCOUNT_ALREADY_EXISTS"
    BAD_SEQUENCE = "BAD_SEQUENCE"


class ProtocolError(Exception):
    pass

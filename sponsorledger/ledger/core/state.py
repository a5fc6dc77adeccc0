# MIT License
# Copyright (c) 2025 Hashborn

import logging
from typing import Dict, List, Optional, Set, Union

from pydantic import TypeAdapter

from .accounts import Account
from ...protocol.types.common import EntryKind
from ...protocol.types.entry import (
    AnySubEntry,
    ClaimableBalanceEntry,
    LedgerKey,
    SubEntry,
)
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)

_sub_entry_adapter = TypeAdapter(AnySubEntry)

ACCOUNT_PREFIX = "acc:"
ENTRY_PREFIX = "ent:"
BALANCE_PREFIX = "cb:"

AnyEntry = Union[Account, SubEntry, ClaimableBalanceEntry]


class LedgerState:
    """
    Write-back cache of accounts, sub-entries and claimable balances.

    Reads fall through to StorageDB; writes stay in memory until persist().
    clone() gives an independent copy for applying a transaction that may
    still be rolled back.
    """

    def __init__(self, db: Optional[StorageDB] = None,
                 accounts: Dict[str, Account] = None,
                 entries: Dict[str, SubEntry] = None,
                 balances: Dict[str, ClaimableBalanceEntry] = None,
                 deleted: Set[str] = None):
        self.db = db
        # Cache: storage key -> model
        self._accounts: Dict[str, Account] = accounts if accounts is not None else {}
        self._entries: Dict[str, SubEntry] = entries if entries is not None else {}
        self._balances: Dict[str, ClaimableBalanceEntry] = balances if balances is not None else {}
        # Storage keys removed since the last persist
        self._deleted: Set[str] = deleted if deleted is not None else set()

    def clone(self) -> 'LedgerState':
        """Creates a copy of the state (for simulation)."""
        return LedgerState(
            self.db,
            {k: v.model_copy(deep=True) for k, v in self._accounts.items()},
            {k: v.model_copy(deep=True) for k, v in self._entries.items()},
            {k: v.model_copy(deep=True) for k, v in self._balances.items()},
            set(self._deleted),
        )

    def _load(self, storage_key: str) -> Optional[str]:
        if self.db is None or storage_key in self._deleted:
            return None
        return self.db.get_state(storage_key)

    # --- Accounts ---
    def get_account(self, account_id: str) -> Optional[Account]:
        key = ACCOUNT_PREFIX + account_id
        if key in self._accounts:
            return self._accounts[key]

        raw_json = self._load(key)
        if raw_json:
            acc = Account.model_validate_json(raw_json)
            self._accounts[key] = acc
            return acc
        return None

    def has_account(self, account_id: str) -> bool:
        return self.get_account(account_id) is not None

    def set_account(self, account: Account):
        key = ACCOUNT_PREFIX + account.account_id
        self._accounts[key] = account
        self._deleted.discard(key)

    # --- Sub-entries ---
    def get_entry(self, ledger_key: LedgerKey) -> Optional[SubEntry]:
        key = ENTRY_PREFIX + ledger_key.as_str()
        if key in self._entries:
            return self._entries[key]

        raw_json = self._load(key)
        if raw_json:
            entry = _sub_entry_adapter.validate_json(raw_json)
            self._entries[key] = entry
            return entry
        return None

    def set_entry(self, entry: SubEntry):
        key = ENTRY_PREFIX + entry.key().as_str()
        self._entries[key] = entry
        self._deleted.discard(key)

    def delete_entry(self, ledger_key: LedgerKey):
        key = ENTRY_PREFIX + ledger_key.as_str()
        self._entries.pop(key, None)
        self._deleted.add(key)

    # --- Claimable balances ---
    def get_claimable_balance(self, balance_id: str) -> Optional[ClaimableBalanceEntry]:
        key = BALANCE_PREFIX + balance_id
        if key in self._balances:
            return self._balances[key]

        raw_json = self._load(key)
        if raw_json:
            entry = ClaimableBalanceEntry.model_validate_json(raw_json)
            self._balances[key] = entry
            return entry
        return None

    def set_claimable_balance(self, entry: ClaimableBalanceEntry):
        key = BALANCE_PREFIX + entry.balance_id
        self._balances[key] = entry
        self._deleted.discard(key)

    def delete_claimable_balance(self, balance_id: str):
        key = BALANCE_PREFIX + balance_id
        self._balances.pop(key, None)
        self._deleted.add(key)

    def load(self, ledger_key: LedgerKey) -> Optional[AnyEntry]:
        """Loads any entry kind by ledger key."""
        if ledger_key.kind == EntryKind.ACCOUNT:
            return self.get_account(ledger_key.account_id or "")
        if ledger_key.kind == EntryKind.CLAIMABLE_BALANCE:
            return self.get_claimable_balance(ledger_key.name)
        return self.get_entry(ledger_key)

    def store(self, entry: AnyEntry):
        if isinstance(entry, Account):
            self.set_account(entry)
        elif isinstance(entry, ClaimableBalanceEntry):
            self.set_claimable_balance(entry)
        else:
            self.set_entry(entry)

    # --- Enumeration (DB + cache overlay) ---
    def _overlay(self, prefix: str, cache: Dict, parse) -> List:
        final = {}
        if self.db is not None:
            for k, v in self.db.get_state_by_prefix(prefix).items():
                if k.startswith(prefix) and k not in self._deleted:
                    final[k] = parse(v)
        # Overlay cache
        final.update(cache)
        return list(final.values())

    def all_accounts(self) -> List[Account]:
        return self._overlay(ACCOUNT_PREFIX, self._accounts, Account.model_validate_json)

    def all_entries(self) -> List[SubEntry]:
        return self._overlay(ENTRY_PREFIX, self._entries, _sub_entry_adapter.validate_json)

    def all_claimable_balances(self) -> List[ClaimableBalanceEntry]:
        return self._overlay(BALANCE_PREFIX, self._balances, ClaimableBalanceEntry.model_validate_json)

    def entries_of(self, account_id: str) -> List[SubEntry]:
        return [e for e in self.all_entries() if e.account_id == account_id]

    def sponsored_by(self, sponsor_id: str) -> List[AnyEntry]:
        """Every account, sub-entry and claimable balance whose reserve sponsor_id pays."""
        found: List[AnyEntry] = []
        for group in (self.all_accounts(), self.all_entries(), self.all_claimable_balances()):
            found.extend(e for e in group if e.sponsor == sponsor_id)
        return found

    def persist(self):
        """Writes modified and deleted records to DB."""
        if self.db is None:
            return
        upserts = []
        for key, acc in self._accounts.items():
            upserts.append((key, acc.model_dump_json()))
        for key, entry in self._entries.items():
            upserts.append((key, entry.model_dump_json()))
        for key, cb in self._balances.items():
            upserts.append((key, cb.model_dump_json()))
        self.db.write_batch(upserts, self._deleted)
        logger.debug(f"Persisted {len(upserts)} records, removed {len(self._deleted)}")
        self._deleted.clear()

# MIT License
# Copyright (c) 2025 Hashborn

import logging
from typing import Optional

from .accounts import Account
from .state import LedgerState
from ...protocol.config.params import INT64_MAX, LedgerConfig
from ...protocol.types.asset import Asset
from ...protocol.types.entry import LedgerKey, TrustLineEntry
from ...protocol.types.errors import LineFull, NoAccount, NoTrustline, Underfunded

logger = logging.getLogger(__name__)


class AssetTransfer:
    """
    Balance debit/credit primitive.

    Native amounts move on the account balance, never below its minimum
    balance. Credit assets move on the holder's trustline, never above its
    limit. The issuer of a credit asset has no trustline for it: amounts it
    sends are minted and amounts it receives are burned.

    check_debit / check_credit raise the same errors as debit / credit
    without touching state, so callers can validate before mutating.
    """

    def __init__(self, state: LedgerState, config: LedgerConfig):
        self.state = state
        self.config = config

    def _account(self, account_id: str) -> Account:
        acc = self.state.get_account(account_id)
        if acc is None:
            raise NoAccount(f"Account {account_id} does not exist", {"account_id": account_id})
        return acc

    def _trustline(self, account_id: str, asset: Asset) -> TrustLineEntry:
        tl = self.state.get_entry(LedgerKey.trustline(account_id, asset))
        if tl is None:
            raise NoTrustline(f"{account_id} has no trustline for {asset}",
                              {"account_id": account_id, "asset": asset.key()})
        return tl

    def check_debit(self, account_id: str, asset: Asset, amount: int, extra_reserves: int = 0) -> Optional[TrustLineEntry]:
        """
        Validates a debit. `extra_reserves` base reserves are kept back from
        a native balance on top of the current minimum.
        """
        if asset.is_native:
            acc = self._account(account_id)
            available = acc.available_balance(self.config.base_reserve) - extra_reserves * self.config.base_reserve
            if available < amount:
                raise Underfunded(f"{account_id} has {available} available, needs {amount}",
                                  {"account_id": account_id, "available": available, "amount": amount})
            return None

        if account_id == asset.issuer:
            return None

        tl = self._trustline(account_id, asset)
        if tl.balance < amount:
            raise Underfunded(f"{account_id} holds {tl.balance} {asset}, needs {amount}",
                              {"account_id": account_id, "available": tl.balance, "amount": amount})
        return tl

    def check_credit(self, account_id: str, asset: Asset, amount: int) -> Optional[TrustLineEntry]:
        if asset.is_native:
            acc = self._account(account_id)
            if acc.balance + amount > INT64_MAX:
                raise LineFull(f"Native balance of {account_id} would overflow",
                               {"account_id": account_id, "amount": amount})
            return None

        if account_id == asset.issuer:
            return None

        tl = self._trustline(account_id, asset)
        if tl.balance + amount > tl.limit:
            raise LineFull(f"Trustline {asset} of {account_id} would exceed limit {tl.limit}",
                           {"account_id": account_id, "limit": tl.limit, "balance": tl.balance, "amount": amount})
        return tl

    def debit(self, account_id: str, asset: Asset, amount: int) -> None:
        tl = self.check_debit(account_id, asset, amount)
        if asset.is_native:
            acc = self._account(account_id)
            acc.balance -= amount
            self.state.set_account(acc)
        elif tl is not None:
            tl.balance -= amount
            self.state.set_entry(tl)
        logger.debug(f"Debited {amount} {asset} from {account_id}")

    def credit(self, account_id: str, asset: Asset, amount: int) -> None:
        tl = self.check_credit(account_id, asset, amount)
        if asset.is_native:
            acc = self._account(account_id)
            acc.balance += amount
            self.state.set_account(acc)
        elif tl is not None:
            tl.balance += amount
            self.state.set_entry(tl)
        logger.debug(f"Credited {amount} {asset} to {account_id}")

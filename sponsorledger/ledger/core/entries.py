# MIT License
# Copyright (c) 2025 Hashborn

"""
Operations that create, update and delete sponsorable entries.

These are the minimal entry-managing operations of the ledger: enough
to open accounts, trustlines, data entries, signers and offers, each
routed through SponsorshipLedger's create/delete hooks so that any
open sponsorship relationship is applied to them.
"""

import logging
from typing import Optional

from .accounts import Account
from .assets import AssetTransfer
from .sponsorship import SponsorshipContext, SponsorshipLedger
from .state import LedgerState
from ...protocol.config.params import ACCOUNT_BASE_RESERVES, LedgerConfig
from ...protocol.types.asset import Asset
from ...protocol.types.entry import (
    DataEntry,
    LedgerKey,
    OfferEntry,
    SignerEntry,
    TrustLineEntry,
)
from ...protocol.types.errors import (
    AccountAlreadyExists,
    EntryNotFound,
    LowReserve,
    MalformedOperation,
    Underfunded,
)

logger = logging.getLogger(__name__)


class EntryOperations:
    def __init__(self, state: LedgerState, config: LedgerConfig,
                 sponsorship: SponsorshipLedger, transfer: AssetTransfer):
        self.state = state
        self.config = config
        self.sponsorship = sponsorship
        self.transfer = transfer

    def create_account(self, ctx: SponsorshipContext, source: str, destination: str, starting_balance: int) -> Account:
        if starting_balance < 0:
            raise MalformedOperation(f"Negative starting balance: {starting_balance}")
        if destination == source:
            raise MalformedOperation("Cannot create the source account")
        self.sponsorship.require_account(source)
        if self.state.has_account(destination):
            raise AccountAlreadyExists(f"Account {destination} already exists", {"account_id": destination})

        sponsor_id = ctx.sponsor_of(destination)
        if sponsor_id is not None:
            self.sponsorship.check_reserve(sponsor_id, ACCOUNT_BASE_RESERVES)
        elif starting_balance < ACCOUNT_BASE_RESERVES * self.config.base_reserve:
            raise LowReserve(
                f"Starting balance {starting_balance} below {ACCOUNT_BASE_RESERVES} base reserves",
                {"account_id": destination, "starting_balance": starting_balance},
            )
        self.transfer.check_debit(source, Asset.native(), starting_balance,
                                  extra_reserves=ACCOUNT_BASE_RESERVES if sponsor_id == source else 0)

        account = Account(account_id=destination, balance=starting_balance)
        self.sponsorship.create_sponsored_account(ctx, account)
        self.transfer.debit(source, Asset.native(), starting_balance)
        logger.info(f"Created account {destination} with {starting_balance} (sponsor={account.sponsor})")
        return account

    def change_trust(self, ctx: SponsorshipContext, source: str, asset: Asset, limit: int) -> None:
        if asset.is_native:
            raise MalformedOperation("Cannot trust the native asset")
        if asset.issuer == source:
            raise MalformedOperation("Issuer cannot trust its own asset")
        if limit < 0:
            raise MalformedOperation(f"Negative trustline limit: {limit}")

        tl = self.state.get_entry(LedgerKey.trustline(source, asset))
        if tl is None:
            if limit == 0:
                raise MalformedOperation(f"No trustline for {asset} to remove")
            self.sponsorship.create_sponsored_entry(
                ctx, source, TrustLineEntry(account_id=source, asset=asset, limit=limit)
            )
        elif limit == 0:
            if tl.balance > 0:
                raise MalformedOperation(f"Trustline {asset} still holds {tl.balance}")
            self.sponsorship.delete_sponsored_entry(tl)
        else:
            if limit < tl.balance:
                raise MalformedOperation(f"Limit {limit} below balance {tl.balance}")
            tl.limit = limit
            self.state.set_entry(tl)

    def manage_data(self, ctx: SponsorshipContext, source: str, name: str, value: Optional[str]) -> None:
        if not name or len(name) > self.config.max_data_name_length:
            raise MalformedOperation(f"Invalid data name length: {len(name)}")
        if value is not None and len(value) > self.config.max_data_value_length:
            raise MalformedOperation(f"Data value too long: {len(value)}")

        existing = self.state.get_entry(LedgerKey.data(source, name))
        if value is None:
            if existing is None:
                raise EntryNotFound(f"No data entry {name!r} on {source}", {"name": name})
            self.sponsorship.delete_sponsored_entry(existing)
        elif existing is not None:
            existing.value = value
            self.state.set_entry(existing)
        else:
            self.sponsorship.create_sponsored_entry(
                ctx, source, DataEntry(account_id=source, name=name, value=value)
            )

    def set_signer(self, ctx: SponsorshipContext, source: str, signer_key: str, weight: int) -> None:
        if signer_key == source:
            raise MalformedOperation("Master key cannot be added as a signer")
        if weight < 0 or weight > self.config.max_signer_weight:
            raise MalformedOperation(f"Signer weight out of range: {weight}")

        existing = self.state.get_entry(LedgerKey.signer(source, signer_key))
        if weight == 0:
            if existing is None:
                raise EntryNotFound(f"No signer {signer_key} on {source}", {"signer_key": signer_key})
            self.sponsorship.delete_sponsored_entry(existing)
        elif existing is not None:
            existing.weight = weight
            self.state.set_entry(existing)
        else:
            self.sponsorship.create_sponsored_entry(
                ctx, source, SignerEntry(account_id=source, signer_key=signer_key, weight=weight)
            )

    def manage_offer(self, ctx: SponsorshipContext, source: str, offer_id: int,
                     selling: Asset, buying: Asset, amount: int) -> None:
        """
        Creates, resizes (amount > 0) or removes (amount 0) a resting offer.

        Native selling amounts are locked as selling liabilities and count
        towards the minimum balance. No matching is performed.
        """
        if amount < 0 or offer_id < 0:
            raise MalformedOperation("Offer id and amount must be non-negative")
        if selling.key() == buying.key():
            raise MalformedOperation("Offer must trade two different assets")

        account = self.sponsorship.require_account(source)
        existing = self.state.get_entry(LedgerKey.offer(source, offer_id))

        if amount == 0:
            if existing is None:
                raise EntryNotFound(f"No offer {offer_id} on {source}", {"offer_id": offer_id})
            if existing.selling.is_native:
                account.selling_liabilities -= existing.amount
                self.state.set_account(account)
            self.sponsorship.delete_sponsored_entry(existing)
            return

        if existing is not None and (existing.selling != selling or existing.buying != buying):
            raise MalformedOperation(f"Offer {offer_id} trades a different pair")

        extra_reserves = 0
        if existing is None:
            sponsor_id = ctx.sponsor_of(source)
            self.sponsorship.check_reserve(sponsor_id or source, 1)
            extra_reserves = 0 if sponsor_id else 1

        if not buying.is_native and buying.issuer != source:
            self.transfer.check_credit(source, buying, 0)

        if selling.is_native:
            delta = amount - (existing.amount if existing else 0)
            required = (account.minimum_balance(self.config.base_reserve)
                        + extra_reserves * self.config.base_reserve + delta)
            if account.balance < required:
                raise Underfunded(f"{source} cannot lock {delta} more in selling liabilities",
                                  {"account_id": source, "balance": account.balance, "required": required})
        else:
            self.transfer.check_debit(source, selling, amount)

        if existing is None:
            self.sponsorship.create_sponsored_entry(
                ctx, source,
                OfferEntry(account_id=source, offer_id=offer_id, selling=selling, buying=buying, amount=amount),
            )
            old_amount = 0
        else:
            old_amount = existing.amount
            existing.amount = amount
            self.state.set_entry(existing)

        if selling.is_native:
            account.selling_liabilities += amount - old_amount
            self.state.set_account(account)

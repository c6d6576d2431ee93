"""
currency.py - Payment units: native currency and fungible tokens.

This module provides:
1. native_currency() / fungible_token() - unit factories
2. fund() - issuance from the system wallet
3. approve() / allowance() - spender allowances for token payments

Amounts are integer minor units (wei for the native currency, base units
for tokens). Allowances live in the token unit's state:

    {'allowances': {owner: {spender: amount}}, 'nonce': n, 'total_issued': t}

All functions take LedgerView (read-only) and return PendingTransactions.
"""

from __future__ import annotations
from decimal import Decimal

from ..core import (
    LedgerView, Move, PendingTransaction, Unit, UnitStateChange,
    TransactionOrigin, OriginType, SYSTEM_WALLET, NATIVE_SYMBOL, MAX_AMOUNT,
    UNIT_TYPE_NATIVE, UNIT_TYPE_TOKEN,
    build_transaction, make_event, is_amount, _freeze_state,
)


def native_currency(symbol: str = NATIVE_SYMBOL, name: str = "Ether") -> Unit:
    """
    Create the native currency unit (amounts in wei).

    Non-system wallets cannot go below zero.
    """
    return Unit(
        symbol=symbol,
        name=name,
        unit_type=UNIT_TYPE_NATIVE,
        decimal_places=0,
        _frozen_state=_freeze_state({'decimals': 18, 'total_issued': 0}),
    )


def fungible_token(address: str, name: str, decimals: int = 18) -> Unit:
    """
    Create a fungible token unit identified by its contract address.

    Args:
        address: Token contract address, used as the unit symbol
        name: Human-readable token name (e.g., "USD Coin")
        decimals: Display decimals; amounts on the ledger are base units
    """
    if not address or not address.strip():
        raise ValueError("token address cannot be empty")
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return Unit(
        symbol=address,
        name=name,
        unit_type=UNIT_TYPE_TOKEN,
        decimal_places=0,
        _frozen_state=_freeze_state({
            'decimals': decimals,
            'allowances': {},
            'nonce': 0,
            'total_issued': 0,
        }),
    )


def fund(view: LedgerView, wallet: str, amount: int, unit_symbol: str = NATIVE_SYMBOL) -> PendingTransaction:
    """
    Issue `amount` of a payment unit to `wallet` from the system wallet.

    The unit's running total_issued is part of the transaction, so two
    fundings of the same amount are distinct intents.
    """
    if not is_amount(amount) or amount == 0:
        raise ValueError(f"amount must be a positive integer, got {amount!r}")

    old_state = view.get_unit_state(unit_symbol)
    total_issued = old_state.get('total_issued', 0) + amount
    if total_issued > MAX_AMOUNT:
        raise ValueError(f"issuing {amount} would take {unit_symbol} supply above {MAX_AMOUNT}")
    new_state = {**old_state, 'total_issued': total_issued}
    return build_transaction(
        view,
        [Move(Decimal(amount), unit_symbol, SYSTEM_WALLET, wallet, f"fund:{unit_symbol}")],
        state_changes=[UnitStateChange(unit_symbol, old_state, new_state)],
        origin=TransactionOrigin(OriginType.SYSTEM, SYSTEM_WALLET, unit_symbol, "FUND"),
    )


def allowance(view: LedgerView, token: str, owner: str, spender: str) -> int:
    """Amount of `token` that `spender` may draw from `owner`."""
    allowances = view.get_unit_state(token).get('allowances', {})
    return allowances.get(owner, {}).get(spender, 0)


def with_allowance(state: dict, owner: str, spender: str, amount: int) -> dict:
    """Return a copy of a token state with owner's allowance for spender set to amount."""
    allowances = {o: dict(s) for o, s in state.get('allowances', {}).items()}
    allowances.setdefault(owner, {})[spender] = amount
    return {**state, 'allowances': allowances, 'nonce': state.get('nonce', 0) + 1}


def approve(view: LedgerView, token: str, owner: str, spender: str, amount: int) -> PendingTransaction:
    """
    Set the allowance `spender` may draw from `owner` in `token`.

    Overwrites any previous allowance; emits Approval.
    """
    if not is_amount(amount):
        raise ValueError(f"allowance must be a non-negative integer, got {amount!r}")
    if view.get_unit(token).unit_type != UNIT_TYPE_TOKEN:
        raise ValueError(f"{token} is not a fungible token")

    old_state = view.get_unit_state(token)
    new_state = with_allowance(old_state, owner, spender, amount)
    return build_transaction(
        view,
        [],
        state_changes=[UnitStateChange(token, old_state, new_state)],
        origin=TransactionOrigin(OriginType.USER_ACTION, owner, token, "APPROVE"),
        events=[make_event("Approval", token, owner=owner, spender=spender, value=amount)],
    )

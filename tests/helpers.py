"""
helpers.py - Constants and builders shared by the test suite.
"""

from datetime import datetime
from typing import Dict, Iterable

from passledger import (
    Ledger, ExperienceFactory, Experience,
    native_currency, fund,
    NATIVE_SYMBOL,
)


ETH = 10**18
PRICE = 10**16                  # 0.01 ETH
PLATFORM_FEE_BPS = 500          # 5%
PROPOSER_FEE_BPS = 1000         # 10%
USDC = "0x" + "a0" * 20
USDC_PRICE = 10_000_000         # 10 USDC (6 decimals)

BUYERS = ("alice", "bob", "carol")


def make_ledger(name: str = "test") -> Ledger:
    """Ledger with the native currency and 10 ETH for each buyer."""
    ledger = Ledger(name, datetime(2025, 1, 1), verbose=False)
    ledger.register_unit(native_currency())
    for buyer in BUYERS:
        ledger.register_wallet(buyer)
        ledger.execute(fund(ledger, buyer, 10 * ETH))
    return ledger


def make_experience(ledger: Ledger, price: int = PRICE,
                    proposer_fee_bps: int = PROPOSER_FEE_BPS,
                    platform_fee_bps: int = PLATFORM_FEE_BPS) -> Experience:
    """Experience owned by 'creator', synced by 'relayer', priced at `price`."""
    factory = ExperienceFactory(ledger, "platform", platform_fee_bps)
    exp = factory.create_experience("creator", "ipfs://test", "relayer", proposer_fee_bps)
    if price:
        exp.set_price("creator", price)
    return exp


def snapshot(ledger: Ledger, wallets: Iterable[str], unit: str = NATIVE_SYMBOL) -> Dict[str, int]:
    """Integer balances of `unit` for each wallet (0 for unregistered wallets)."""
    return {
        w: int(ledger.get_balance(w, unit)) if ledger.is_registered(w) else 0
        for w in wallets
    }


def deltas(before: Dict[str, int], after: Dict[str, int]) -> Dict[str, int]:
    """Per-wallet change between two snapshots."""
    return {w: after[w] - before[w] for w in before}

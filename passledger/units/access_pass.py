"""
access_pass.py - Soulbound access passes.

Each experience owns one pass unit, symbol "PASS@<experience address>".
The unit carries the soulbound transfer rule and, as its state, the
experience term sheet (owner, prices, fees, proposer, cid).

AccessPass is a closed interface over that unit: mint and balance queries
are the only supported operations; every transfer-shaped operation fails
with TransfersDisabled.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, Iterable

from ..access import reject_transfer, soulbound_transfer_rule
from ..core import (
    LedgerView, Move, Unit, SYSTEM_WALLET, UNIT_TYPE_ACCESS_PASS, PASS_ID, _freeze_state,
)


def pass_symbol(experience_address: str) -> str:
    """Ledger unit symbol of an experience's passes."""
    return f"PASS@{experience_address}"


def create_pass_unit(experience_address: str, term_sheet: Dict[str, Any]) -> Unit:
    """
    Create the pass unit for an experience.

    Args:
        experience_address: Address of the experience
        term_sheet: Initial experience state (see experience.initial_state)
    """
    return Unit(
        symbol=pass_symbol(experience_address),
        name=f"Experience Pass {experience_address}",
        unit_type=UNIT_TYPE_ACCESS_PASS,
        min_balance=Decimal("0"),
        decimal_places=0,
        transfer_rule=soulbound_transfer_rule,
        _frozen_state=_freeze_state(term_sheet),
    )


class AccessPass:
    """
    Mint-only, non-transferable pass of a single experience.

    Example:
        passes = AccessPass("0xabc...")
        move = passes.mint("alice", 2)          # system -> alice
        passes.balance_of(ledger, "alice")      # 2 once executed
        passes.safe_transfer_from("alice", "alice", "bob", 1, 1)  # raises
    """

    __slots__ = ('symbol',)

    def __init__(self, experience_address: str):
        self.symbol = pass_symbol(experience_address)

    def mint(self, holder: str, quantity: int) -> Move:
        """Move minting `quantity` passes to `holder`."""
        if quantity <= 0:
            raise ValueError(f"mint quantity must be positive, got {quantity}")
        return Move(Decimal(quantity), self.symbol, SYSTEM_WALLET, holder, f"mint:{self.symbol}")

    def balance_of(self, view: LedgerView, holder: str, pass_id: int = PASS_ID) -> int:
        """Passes held by `holder`; 0 for unknown holders and other pass ids."""
        if pass_id != PASS_ID or holder not in view.list_wallets():
            return 0
        return int(view.get_balance(holder, self.symbol))

    def safe_transfer_from(self, caller: str, source: str, dest: str,
                           pass_id: int, quantity: int, data: bytes = b"") -> None:
        reject_transfer("safe_transfer_from")

    def safe_batch_transfer_from(self, caller: str, source: str, dest: str,
                                 pass_ids: Iterable[int], quantities: Iterable[int],
                                 data: bytes = b"") -> None:
        reject_transfer("safe_batch_transfer_from")

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        reject_transfer("set_approval_for_all")

    def is_approved_for_all(self, holder: str, operator: str) -> bool:
        return False

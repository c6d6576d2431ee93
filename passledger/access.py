"""
access.py - Access control for experience mutators and passes.

Two roles guard an experience:
- owner: price, token prices, proposer fee, ownership transfer
- flow_sync_authority: content pointer (cid) and current proposer

Passes are soulbound: the only move of a pass unit the ledger accepts is a
mint from the system wallet. Everything else fails with TransfersDisabled.
"""

from __future__ import annotations

from .core import (
    LedgerView, Move, UnitState, SYSTEM_WALLET,
    OwnershipViolation, AuthorityViolation, TransfersDisabled,
)


def require_owner(state: UnitState, caller: str) -> None:
    """Raise OwnershipViolation unless caller is the experience owner."""
    if caller != state['owner']:
        raise OwnershipViolation(f"{caller} is not the owner of {state['address']}")


def require_flow_sync_authority(state: UnitState, caller: str) -> None:
    """Raise AuthorityViolation unless caller is the flow-sync authority."""
    if caller != state['flow_sync_authority']:
        raise AuthorityViolation(
            f"{caller} is not the flow sync authority of {state['address']}"
        )


def reject_transfer(operation: str) -> None:
    """Always raises: passes cannot be moved, batch-moved or approved."""
    raise TransfersDisabled(f"{operation}: transfers disabled for soulbound passes")


def soulbound_transfer_rule(view: LedgerView, move: Move) -> None:
    """
    Transfer rule for pass units: only system -> holder mints are allowed.

    Raises:
        TransfersDisabled: for any holder-to-holder move or burn
    """
    if move.source != SYSTEM_WALLET or move.dest == SYSTEM_WALLET:
        raise TransfersDisabled(
            f"{move.unit_symbol}: transfers disabled ({move.source} → {move.dest})"
        )

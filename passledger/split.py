"""
split.py - Revenue split between platform, proposer and creator.

A single pure function: given a payment total and the fee configuration,
return three non-negative integer shares that sum exactly to the total.
Platform and proposer shares are floored; the creator receives the exact
remainder, so no minor unit is ever lost to rounding.
"""

from __future__ import annotations
from dataclasses import dataclass

from .core import BPS_DENOMINATOR, MAX_BPS


@dataclass(frozen=True, slots=True)
class Split:
    """
    Distribution of one payment.

    Attributes:
        platform: Share routed to the platform wallet
        proposer: Share routed to the current proposer (0 when none is set)
        creator: Remainder routed to the experience owner
    """
    platform: int
    proposer: int
    creator: int

    @property
    def total(self) -> int:
        return self.platform + self.proposer + self.creator


def _check_bps(name: str, bps: int) -> None:
    if not 0 <= bps <= MAX_BPS:
        raise ValueError(f"{name} must be in [0, {MAX_BPS}], got {bps}")


def compute_split(
    total: int,
    platform_fee_bps: int,
    proposer_fee_bps: int,
    has_proposer: bool,
) -> Split:
    """
    Split a payment of `total` minor units.

    Algorithm:
        platform = floor(total * platform_fee_bps / 10_000)
        proposer = floor(total * proposer_fee_bps / 10_000) if has_proposer else 0
                   clamped to total - platform
        creator  = total - platform - proposer

    Without a proposer the proposer bps is never extracted; it stays in the
    creator's remainder. If the two fees add up to more than 10_000 bps the
    proposer share is clamped so the creator share bottoms out at zero.

    Args:
        total: Payment total (non-negative integer)
        platform_fee_bps: Platform fee in basis points
        proposer_fee_bps: Proposer fee in basis points
        has_proposer: Whether a proposer is currently set

    Returns:
        Split whose shares sum to `total`

    Raises:
        ValueError: negative total, or bps outside [0, 10_000]

    Example:
        >>> compute_split(30_000_000_000_000_000, 500, 1000, True)
        Split(platform=1500000000000000, proposer=3000000000000000, creator=25500000000000000)
    """
    if total < 0:
        raise ValueError(f"total must be non-negative, got {total}")
    _check_bps("platform_fee_bps", platform_fee_bps)
    _check_bps("proposer_fee_bps", proposer_fee_bps)

    platform = total * platform_fee_bps // BPS_DENOMINATOR
    proposer = 0
    if has_proposer:
        proposer = min(total * proposer_fee_bps // BPS_DENOMINATOR, total - platform)
    creator = total - platform - proposer
    return Split(platform=platform, proposer=proposer, creator=creator)

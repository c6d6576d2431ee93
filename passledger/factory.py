"""
factory.py - Deploys experiences with fixed platform parameters.

Every experience created by one factory shares the factory's platform
wallet and platform fee. The factory keeps no registry of what it created:
off-ledger indexers follow the ExperienceCreated events instead.
"""

from __future__ import annotations
from typing import Optional

from .core import (
    TransactionOrigin, OriginType, ExecuteResult, LedgerError,
    build_transaction, make_event, derive_address, is_zero_address,
)
from .experience import Experience, initial_state, check_fee_bps
from .units.access_pass import create_pass_unit, pass_symbol


class ExperienceFactory:
    """
    Factory for Experience instances on a ledger.

    Example:
        factory = ExperienceFactory(ledger, platform_wallet="platform", platform_fee_bps=500)
        exp = factory.create_experience("creator", "ipfs://cid", "relayer", 1000)
    """

    def __init__(
        self,
        ledger,
        platform_wallet: str,
        platform_fee_bps: int,
        address: Optional[str] = None,
    ):
        """
        Args:
            ledger: Ledger the experiences settle on
            platform_wallet: Receives the platform share of every purchase
            platform_fee_bps: Platform share in basis points (0..10_000)
            address: Factory address (derived from the ledger name if omitted)

        Raises:
            InvalidFeeBps: platform_fee_bps outside [0, 10_000]
            ValueError: zero platform wallet
        """
        check_fee_bps(platform_fee_bps)
        if is_zero_address(platform_wallet):
            raise ValueError("platform wallet cannot be the zero address")
        self.ledger = ledger
        self._platform_wallet = platform_wallet
        self._platform_fee_bps = platform_fee_bps
        self.address = address or derive_address(f"factory:{ledger.name}", 0)
        self._deployments = 0
        ledger.ensure_wallet(platform_wallet)

    @property
    def platform_wallet(self) -> str:
        return self._platform_wallet

    @property
    def platform_fee_bps(self) -> int:
        return self._platform_fee_bps

    def _next_address(self) -> str:
        # Skip addresses already taken on this ledger (e.g. a replayed factory)
        while True:
            self._deployments += 1
            candidate = derive_address(self.address, self._deployments)
            if pass_symbol(candidate) not in self.ledger.units:
                return candidate

    def create_experience(
        self,
        creator: str,
        cid: str,
        flow_sync_authority: str,
        proposer_fee_bps: int,
    ) -> Experience:
        """
        Deploy a new experience owned by `creator`.

        The pass unit, with its initial term sheet, is created by a single
        transaction that also emits ExperienceCreated(experience, creator, cid).
        The new experience starts with price 0 (sales paused) and no proposer.

        Raises:
            InvalidFeeBps: proposer_fee_bps outside [0, 10_000]
            ValueError: zero creator or flow sync authority
        """
        if is_zero_address(creator):
            raise ValueError("creator cannot be the zero address")
        if is_zero_address(flow_sync_authority):
            raise ValueError("flow sync authority cannot be the zero address")
        check_fee_bps(proposer_fee_bps)

        address = self._next_address()
        unit = create_pass_unit(address, initial_state(
            address=address,
            owner=creator,
            flow_sync_authority=flow_sync_authority,
            cid=cid,
            platform_wallet=self._platform_wallet,
            platform_fee_bps=self._platform_fee_bps,
            proposer_fee_bps=proposer_fee_bps,
        ))
        pending = build_transaction(
            self.ledger,
            [],
            origin=TransactionOrigin(OriginType.CONTRACT, self.address, unit.symbol, "CREATE_EXPERIENCE"),
            units_to_create=(unit,),
            events=[make_event("ExperienceCreated", self.address,
                               experience=address, creator=creator, cid=cid)],
        )
        if self.ledger.execute(pending) != ExecuteResult.APPLIED:
            raise LedgerError(f"could not deploy experience {address}: {self.ledger.last_rejection}")
        for wallet in (address, creator, flow_sync_authority):
            self.ledger.ensure_wallet(wallet)

        if self.ledger.verbose:
            print(f"Deployed experience {address} for {creator} (cid={cid})")
        return Experience(self.ledger, address)

"""
experience.py - Per-experience settlement: state, purchases, configuration.

This module provides:
1. initial_state() / get_experience_state() - the experience term sheet
2. compute_purchase() / compute_token_purchase() - purchase flows
3. compute_set_*() / compute_transfer_ownership() - guarded mutators
4. Experience - handle that executes the above against a Ledger

The term sheet is the state of the experience's pass unit:

    {
        'address': '0x...',
        'owner': creator address,
        'flow_sync_authority': relayer address,
        'cid': 'ipfs://...',
        'price_eth_wei': 0,                  # 0 = sales paused
        'price_by_token': {token: price},
        'platform_wallet': address,          # fixed at creation
        'platform_fee_bps': 500,             # fixed at creation
        'proposer_fee_bps': 1000,
        'current_proposer': ZERO_ADDRESS,
        'total_sold': 0,
        'nonce': 0,                          # bumped by every mutation
    }

Purchase pattern (native currency, proposer set):
    Move(platform_share, "ETH", buyer, platform_wallet)
    Move(proposer_share, "ETH", buyer, current_proposer)
    Move(creator_share,  "ETH", buyer, owner)
    Move(quantity, "PASS@<address>", system, buyer)

All compute_* functions take LedgerView (read-only), check preconditions
before building anything, and return a PendingTransaction.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .access import require_owner, require_flow_sync_authority
from .core import (
    LedgerView, Move, PendingTransaction, UnitStateChange, UnitState, Event,
    TransactionOrigin, OriginType, ExecuteResult,
    ZERO_ADDRESS, NATIVE_SYMBOL, MAX_BPS, MAX_AMOUNT, PASS_ID, UNIT_TYPE_TOKEN,
    LedgerError, InsufficientFunds, WalletNotRegistered,
    InvalidQuantity, InvalidPrice, PaymentMismatch, InvalidFeeBps, TokenTransferFailed,
    build_transaction, make_event, is_zero_address, normalize_address, is_amount,
)
from .split import Split, compute_split
from .units.access_pass import AccessPass, pass_symbol
from .units.currency import allowance, with_allowance


# ============================================================================
# STATE
# ============================================================================

def initial_state(
    address: str,
    owner: str,
    flow_sync_authority: str,
    cid: str,
    platform_wallet: str,
    platform_fee_bps: int,
    proposer_fee_bps: int,
) -> UnitState:
    """Term sheet of a freshly deployed experience: no proposer, sales paused."""
    return {
        'address': address,
        'owner': owner,
        'flow_sync_authority': flow_sync_authority,
        'cid': cid,
        'price_eth_wei': 0,
        'price_by_token': {},
        'platform_wallet': platform_wallet,
        'platform_fee_bps': platform_fee_bps,
        'proposer_fee_bps': proposer_fee_bps,
        'current_proposer': ZERO_ADDRESS,
        'total_sold': 0,
        'nonce': 0,
    }


def get_experience_state(view: LedgerView, address: str) -> UnitState:
    """Copy of the experience term sheet."""
    return view.get_unit_state(pass_symbol(address))


def check_fee_bps(bps: int) -> None:
    """Raise InvalidFeeBps unless 0 <= bps <= 10_000."""
    if not isinstance(bps, int) or not 0 <= bps <= MAX_BPS:
        raise InvalidFeeBps(f"fee bps must be in [0, {MAX_BPS}], got {bps}")


def check_price(price: int) -> None:
    """Raise ValueError unless price is an integer number of minor units."""
    if not is_amount(price):
        raise ValueError(f"price must be a non-negative integer <= {MAX_AMOUNT}, got {price!r}")


def _split_for(state: UnitState, total: int) -> Split:
    return compute_split(
        total,
        state['platform_fee_bps'],
        state['proposer_fee_bps'],
        has_proposer=not is_zero_address(state['current_proposer']),
    )


def _unit_price(state: UnitState, token: Optional[str]) -> int:
    if token is None:
        return state['price_eth_wei']
    return state['price_by_token'].get(token, 0)


def _check_purchase(state: UnitState, quantity: int, token: Optional[str]) -> int:
    """Validate quantity and price; return the purchase cost."""
    if not is_amount(quantity) or quantity == 0:
        raise InvalidQuantity(f"quantity must be a positive integer, got {quantity!r}")
    price = _unit_price(state, token)
    currency = token or NATIVE_SYMBOL
    if price == 0:
        raise InvalidPrice(f"price is 0 for {currency}: sales paused on {state['address']}")
    cost = price * quantity
    if cost > MAX_AMOUNT:
        raise InvalidQuantity(f"{quantity} x {price} {currency} exceeds the largest payable amount")
    return cost


def quote(view: LedgerView, address: str, quantity: int, token: Optional[str] = None) -> Split:
    """
    Shares a purchase of `quantity` passes would produce right now.

    Raises the same InvalidQuantity / InvalidPrice errors a purchase would.
    """
    state = get_experience_state(view, address)
    return _split_for(state, _check_purchase(state, quantity, token))


# ============================================================================
# PURCHASE FLOW
# ============================================================================

def _payout_moves(state: UnitState, split: Split, unit_symbol: str, payer: str) -> List[Move]:
    """
    Moves paying out a split. Zero shares and shares owed to the payer
    itself produce no move.
    """
    payouts = [
        (state['platform_wallet'], split.platform),
        (state['current_proposer'], split.proposer),
        (state['owner'], split.creator),
    ]
    contract_id = f"buy:{state['address']}"
    return [
        Move(Decimal(amount), unit_symbol, payer, recipient, contract_id)
        for recipient, amount in payouts
        if amount > 0 and recipient != payer
    ]


def _sold(state: UnitState, quantity: int) -> UnitState:
    return {**state, 'total_sold': state['total_sold'] + quantity, 'nonce': state['nonce'] + 1}


def compute_purchase(
    view: LedgerView,
    address: str,
    buyer: str,
    quantity: int,
    value: int,
) -> PendingTransaction:
    """
    Buy `quantity` passes with `value` wei attached.

    Preconditions, in order:
        InvalidQuantity: quantity not a positive integer, or cost above MAX_AMOUNT
        InvalidPrice: price_eth_wei == 0 (sales paused)
        PaymentMismatch: value is not the integer price_eth_wei * quantity

    The returned transaction pays out the split, mints the passes and emits
    Bought. If the buyer does not hold `value`, the ledger rejects it.
    """
    state = get_experience_state(view, address)
    cost = _check_purchase(state, quantity, None)
    if not is_amount(value) or value != cost:
        raise PaymentMismatch(
            f"payment of {value!r} wei does not match {quantity} x {state['price_eth_wei']} = {cost}"
        )
    if buyer not in view.list_wallets():
        raise WalletNotRegistered(f"Wallet {buyer} not registered")

    split = _split_for(state, cost)
    passes = AccessPass(address)
    moves = _payout_moves(state, split, NATIVE_SYMBOL, buyer)
    moves.append(passes.mint(buyer, quantity))

    return build_transaction(
        view,
        moves,
        state_changes=[UnitStateChange(passes.symbol, state, _sold(state, quantity))],
        origin=TransactionOrigin(OriginType.USER_ACTION, buyer, passes.symbol, "BUY"),
        events=[make_event(
            "Bought", address,
            buyer=buyer, quantity=quantity, paid=cost, currency=NATIVE_SYMBOL,
        )],
    )


def compute_token_purchase(
    view: LedgerView,
    address: str,
    buyer: str,
    token: str,
    quantity: int,
) -> PendingTransaction:
    """
    Buy `quantity` passes paying in `token` at the experience's token price.

    The experience draws the cost from the allowance the buyer granted it
    (see units.currency.approve) and splits it exactly like a native-currency
    payment.

    Raises:
        InvalidQuantity, InvalidPrice: as compute_purchase
        TokenTransferFailed: allowance or token balance below cost
    """
    state = get_experience_state(view, address)
    cost = _check_purchase(state, quantity, token)
    if buyer not in view.list_wallets():
        raise WalletNotRegistered(f"Wallet {buyer} not registered")

    granted = allowance(view, token, buyer, address)
    if granted < cost:
        raise TokenTransferFailed(f"allowance {granted} < cost {cost} for {token}")
    held = view.get_balance(buyer, token)
    if held < cost:
        raise TokenTransferFailed(f"balance {held} < cost {cost} for {token}")

    split = _split_for(state, cost)
    passes = AccessPass(address)
    moves = _payout_moves(state, split, token, buyer)
    moves.append(passes.mint(buyer, quantity))

    token_state = view.get_unit_state(token)
    return build_transaction(
        view,
        moves,
        state_changes=[
            UnitStateChange(passes.symbol, state, _sold(state, quantity)),
            UnitStateChange(token, token_state, with_allowance(token_state, buyer, address, granted - cost)),
        ],
        origin=TransactionOrigin(OriginType.USER_ACTION, buyer, passes.symbol, "BUY_WITH_TOKEN"),
        events=[make_event(
            "Bought", address,
            buyer=buyer, quantity=quantity, paid=cost, currency=token,
        )],
    )


# ============================================================================
# CONFIGURATION (guarded mutators)
# ============================================================================

def _mutation(
    view: LedgerView,
    state: UnitState,
    caller: str,
    event_type: str,
    updates: Dict[str, Any],
    event: Event,
) -> PendingTransaction:
    symbol = pass_symbol(state['address'])
    new_state = {**state, **updates, 'nonce': state['nonce'] + 1}
    return build_transaction(
        view,
        [],
        state_changes=[UnitStateChange(symbol, state, new_state)],
        origin=TransactionOrigin(OriginType.USER_ACTION, caller, symbol, event_type),
        events=[event],
    )


def compute_set_price(view: LedgerView, address: str, caller: str, price: int) -> PendingTransaction:
    """Owner only. Set the native-currency price per pass; 0 pauses sales."""
    state = get_experience_state(view, address)
    require_owner(state, caller)
    check_price(price)
    return _mutation(view, state, caller, "SET_PRICE", {'price_eth_wei': price},
                     make_event("PriceUpdated", address, price=price))


def compute_set_token_price(
    view: LedgerView, address: str, caller: str, token: str, price: int,
) -> PendingTransaction:
    """Owner only. Set the price per pass in `token`; 0 stops token sales."""
    state = get_experience_state(view, address)
    require_owner(state, caller)
    check_price(price)
    if view.get_unit(token).unit_type != UNIT_TYPE_TOKEN:
        raise ValueError(f"{token} is not a fungible token")
    prices = {**state['price_by_token'], token: price}
    return _mutation(view, state, caller, "SET_TOKEN_PRICE", {'price_by_token': prices},
                     make_event("TokenPriceUpdated", address, token=token, price=price))


def compute_set_proposer_fee_bps(view: LedgerView, address: str, caller: str, bps: int) -> PendingTransaction:
    """Owner only. Set the proposer fee share in basis points (0..10_000)."""
    state = get_experience_state(view, address)
    require_owner(state, caller)
    check_fee_bps(bps)
    return _mutation(view, state, caller, "SET_PROPOSER_FEE", {'proposer_fee_bps': bps},
                     make_event("ProposerFeeUpdated", address, bps=bps))


def compute_transfer_ownership(view: LedgerView, address: str, caller: str, new_owner: str) -> PendingTransaction:
    """Owner only. Hand owner rights (and future creator shares) to new_owner."""
    state = get_experience_state(view, address)
    require_owner(state, caller)
    if is_zero_address(new_owner):
        raise ValueError("new owner cannot be the zero address")
    return _mutation(view, state, caller, "TRANSFER_OWNERSHIP", {'owner': new_owner},
                     make_event("OwnershipTransferred", address,
                                previous_owner=state['owner'], new_owner=new_owner))


def compute_set_content_pointer(view: LedgerView, address: str, caller: str, cid: str) -> PendingTransaction:
    """Flow-sync authority only. Replace the content pointer; cid is opaque."""
    state = get_experience_state(view, address)
    require_flow_sync_authority(state, caller)
    if not isinstance(cid, str):
        raise ValueError(f"cid must be a string, got {type(cid)}")
    return _mutation(view, state, caller, "SET_CID", {'cid': cid},
                     make_event("CidUpdated", address, cid=cid))


def compute_set_current_proposer(
    view: LedgerView, address: str, caller: str, proposer: Optional[str],
) -> PendingTransaction:
    """Flow-sync authority only. Set the proposer; None or the zero address clears it."""
    state = get_experience_state(view, address)
    require_flow_sync_authority(state, caller)
    proposer = normalize_address(proposer)
    return _mutation(view, state, caller, "SET_PROPOSER", {'current_proposer': proposer},
                     make_event("ProposerUpdated", address, proposer=proposer))


# ============================================================================
# EXPERIENCE HANDLE
# ============================================================================

class Experience:
    """
    Handle on one deployed experience.

    Every operation reads the term sheet from the ledger, checks its
    preconditions, and executes a single atomic transaction. Failures raise
    before anything is applied.

    Example:
        exp = factory.create_experience("creator", "ipfs://cid", "relayer", 1000)
        exp.set_price("creator", 10**16)
        exp.buy_with_native_currency("alice", 3, value=3 * 10**16)
        exp.balance_of("alice", PASS_ID)   # 3
    """

    def __init__(self, ledger, address: str):
        self.ledger = ledger
        self.address = address
        self.passes = AccessPass(address)

    def __repr__(self) -> str:
        return f"Experience({self.address})"

    def _submit(self, pending: PendingTransaction) -> ExecuteResult:
        result = self.ledger.execute(pending)
        if result == ExecuteResult.REJECTED:
            reason = self.ledger.last_rejection
            if reason.startswith("insufficient funds"):
                raise InsufficientFunds(reason)
            raise LedgerError(f"{pending.origin.event_type} rejected: {reason}")
        return result

    # -- reads ---------------------------------------------------------------

    @property
    def state(self) -> UnitState:
        return get_experience_state(self.ledger, self.address)

    @property
    def owner(self) -> str:
        return self.state['owner']

    @property
    def flow_sync_authority(self) -> str:
        return self.state['flow_sync_authority']

    @property
    def cid(self) -> str:
        return self.state['cid']

    @property
    def price_eth_wei(self) -> int:
        return self.state['price_eth_wei']

    def price_by_token(self, token: str) -> int:
        return self.state['price_by_token'].get(token, 0)

    @property
    def platform_wallet(self) -> str:
        return self.state['platform_wallet']

    @property
    def platform_fee_bps(self) -> int:
        return self.state['platform_fee_bps']

    @property
    def proposer_fee_bps(self) -> int:
        return self.state['proposer_fee_bps']

    @property
    def current_proposer(self) -> str:
        return self.state['current_proposer']

    @property
    def total_sold(self) -> int:
        return self.state['total_sold']

    def balance_of(self, holder: str, pass_id: int = PASS_ID) -> int:
        return self.passes.balance_of(self.ledger, holder, pass_id)

    def quote(self, quantity: int, token: Optional[str] = None) -> Split:
        return quote(self.ledger, self.address, quantity, token)

    # -- purchases -----------------------------------------------------------

    def buy_with_native_currency(self, buyer: str, quantity: int, value: int) -> ExecuteResult:
        return self._submit(compute_purchase(self.ledger, self.address, buyer, quantity, value))

    def buy_with_token(self, buyer: str, token: str, quantity: int) -> ExecuteResult:
        return self._submit(compute_token_purchase(self.ledger, self.address, buyer, token, quantity))

    # -- owner ---------------------------------------------------------------

    def set_price(self, caller: str, price: int) -> ExecuteResult:
        return self._submit(compute_set_price(self.ledger, self.address, caller, price))

    def set_token_price(self, caller: str, token: str, price: int) -> ExecuteResult:
        return self._submit(compute_set_token_price(self.ledger, self.address, caller, token, price))

    def set_proposer_fee_bps(self, caller: str, bps: int) -> ExecuteResult:
        return self._submit(compute_set_proposer_fee_bps(self.ledger, self.address, caller, bps))

    def transfer_ownership(self, caller: str, new_owner: str) -> ExecuteResult:
        result = self._submit(compute_transfer_ownership(self.ledger, self.address, caller, new_owner))
        self.ledger.ensure_wallet(new_owner)
        return result

    # -- flow sync authority -------------------------------------------------

    def set_content_pointer(self, caller: str, cid: str) -> ExecuteResult:
        return self._submit(compute_set_content_pointer(self.ledger, self.address, caller, cid))

    def set_current_proposer(self, caller: str, proposer: Optional[str]) -> ExecuteResult:
        result = self._submit(compute_set_current_proposer(self.ledger, self.address, caller, proposer))
        # Registered only once applied: a rejected update leaves no wallet behind
        if not is_zero_address(proposer):
            self.ledger.ensure_wallet(proposer)
        return result

    # -- soulbound: always rejected -----------------------------------------

    def safe_transfer_from(self, caller: str, source: str, dest: str,
                           pass_id: int, quantity: int, data: bytes = b"") -> None:
        self.passes.safe_transfer_from(caller, source, dest, pass_id, quantity, data)

    def safe_batch_transfer_from(self, caller: str, source: str, dest: str,
                                 pass_ids: Iterable[int], quantities: Iterable[int],
                                 data: bytes = b"") -> None:
        self.passes.safe_batch_transfer_from(caller, source, dest, pass_ids, quantities, data)

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        self.passes.set_approval_for_all(caller, operator, approved)

    def is_approved_for_all(self, holder: str, operator: str) -> bool:
        return self.passes.is_approved_for_all(holder, operator)

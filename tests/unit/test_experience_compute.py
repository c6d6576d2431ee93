"""
test_experience_compute.py - Pure purchase and mutator functions on a FakeView

Tests:
- compute_purchase moves, state change and event
- Precondition order (quantity, price, payment)
- Self-payment produces no move
- compute_token_purchase allowance/balance checks and allowance consumption
- Guarded mutators build a single state change with a bumped nonce
"""

import pytest
from decimal import Decimal

from passledger import (
    compute_purchase, compute_token_purchase, compute_set_price, compute_set_token_price,
    compute_set_proposer_fee_bps, compute_transfer_ownership,
    compute_set_content_pointer, compute_set_current_proposer,
    initial_state, pass_symbol, fungible_token, native_currency, quote, Split,
    InvalidQuantity, InvalidPrice, PaymentMismatch, OwnershipViolation, AuthorityViolation,
    InvalidFeeBps, TokenTransferFailed, WalletNotRegistered,
    SYSTEM_WALLET, ZERO_ADDRESS, NATIVE_SYMBOL, MAX_AMOUNT,
)

from tests.fake_view import FakeView
from tests.helpers import PRICE, USDC


ADDRESS = "0xexp"
SYMBOL = pass_symbol(ADDRESS)


def _view(price=PRICE, proposer=ZERO_ADDRESS, token_price=0, allowance=0, owner="creator"):
    state = initial_state(
        address=ADDRESS, owner=owner, flow_sync_authority="relayer", cid="ipfs://x",
        platform_wallet="platform", platform_fee_bps=500, proposer_fee_bps=1000,
    )
    state["price_eth_wei"] = price
    state["current_proposer"] = proposer
    if token_price:
        state["price_by_token"] = {USDC: token_price}
    token_state = {"allowances": {"alice": {ADDRESS: allowance}}, "nonce": 0}
    return FakeView(
        balances={
            "alice": {NATIVE_SYMBOL: 10**18, USDC: 50_000_000},
            "creator": {}, "platform": {}, "relayer": {}, "proposer": {},
        },
        states={SYMBOL: state, USDC: token_state},
        units={USDC: fungible_token(USDC, "USD Coin", 6), NATIVE_SYMBOL: native_currency()},
    )


class TestComputePurchase:

    def test_moves_with_proposer(self):
        pending = compute_purchase(_view(proposer="proposer"), ADDRESS, "alice", 3, 3 * PRICE)
        moves = {(m.dest, m.unit_symbol): m.quantity for m in pending.moves}
        assert moves == {
            ("platform", NATIVE_SYMBOL): Decimal(15 * 10**14),
            ("proposer", NATIVE_SYMBOL): Decimal(3 * 10**15),
            ("creator", NATIVE_SYMBOL): Decimal(255 * 10**14),
            ("alice", SYMBOL): Decimal(3),
        }
        mint = [m for m in pending.moves if m.unit_symbol == SYMBOL][0]
        assert mint.source == SYSTEM_WALLET

    def test_no_proposer_move_when_unset(self):
        pending = compute_purchase(_view(), ADDRESS, "alice", 3, 3 * PRICE)
        dests = [m.dest for m in pending.moves]
        assert ZERO_ADDRESS not in dests
        creator = [m for m in pending.moves if m.dest == "creator"][0]
        assert creator.quantity == Decimal(285 * 10**14)

    def test_state_change_and_event(self):
        pending = compute_purchase(_view(), ADDRESS, "alice", 2, 2 * PRICE)
        (sc,) = pending.state_changes
        assert sc.unit == SYMBOL
        assert sc.changed_fields() == {"total_sold": (0, 2), "nonce": (0, 1)}
        (event,) = pending.events
        assert event.name == "Bought"
        assert event.params_dict == {
            "buyer": "alice", "quantity": 2, "paid": 2 * PRICE, "currency": NATIVE_SYMBOL,
        }

    def test_owner_buying_own_pass_pays_no_creator_move(self):
        view = _view(owner="alice")
        pending = compute_purchase(view, ADDRESS, "alice", 1, PRICE)
        assert [m.dest for m in pending.moves if m.unit_symbol == NATIVE_SYMBOL] == ["platform"]

    def test_precondition_order(self):
        # zero quantity wins over paused sales and wrong payment
        with pytest.raises(InvalidQuantity):
            compute_purchase(_view(price=0), ADDRESS, "alice", 0, 123)
        # paused sales win over wrong payment
        with pytest.raises(InvalidPrice, match="sales paused"):
            compute_purchase(_view(price=0), ADDRESS, "alice", 1, 123)
        with pytest.raises(PaymentMismatch):
            compute_purchase(_view(), ADDRESS, "alice", 1, 123)

    @pytest.mark.parametrize("value", [2 * PRICE - 1, 2 * PRICE + 1, 0])
    def test_payment_must_be_exact(self, value):
        with pytest.raises(PaymentMismatch, match="does not match"):
            compute_purchase(_view(), ADDRESS, "alice", 2, value)

    @pytest.mark.parametrize("quantity", [True, 1.0, 0.5, "1"])
    def test_quantity_must_be_an_integer(self, quantity):
        with pytest.raises(InvalidQuantity):
            compute_purchase(_view(), ADDRESS, "alice", quantity, PRICE)

    @pytest.mark.parametrize("value", [float(PRICE), Decimal(PRICE), True])
    def test_payment_must_be_an_integer(self, value):
        with pytest.raises(PaymentMismatch):
            compute_purchase(_view(), ADDRESS, "alice", 1, value)

    def test_cost_above_largest_amount(self):
        view = _view(price=MAX_AMOUNT // 2 + 1)
        with pytest.raises(InvalidQuantity, match="largest payable amount"):
            compute_purchase(view, ADDRESS, "alice", 2, 2 * (MAX_AMOUNT // 2 + 1))

    def test_unregistered_buyer(self):
        with pytest.raises(WalletNotRegistered):
            compute_purchase(_view(), ADDRESS, "mallory", 1, PRICE)

    def test_quote_matches_purchase(self):
        assert quote(_view(proposer="proposer"), ADDRESS, 3) == Split(
            platform=15 * 10**14, proposer=3 * 10**15, creator=255 * 10**14
        )


class TestComputeTokenPurchase:

    def test_consumes_allowance(self):
        view = _view(token_price=10_000_000, allowance=30_000_000)
        pending = compute_token_purchase(view, ADDRESS, "alice", USDC, 2)
        token_change = [sc for sc in pending.state_changes if sc.unit == USDC][0]
        assert token_change.new_state["allowances"]["alice"][ADDRESS] == 10_000_000
        paid = sum(m.quantity for m in pending.moves if m.unit_symbol == USDC)
        assert paid == Decimal(20_000_000)
        assert pending.events[0].params_dict["currency"] == USDC

    def test_allowance_too_low(self):
        view = _view(token_price=10_000_000, allowance=19_999_999)
        with pytest.raises(TokenTransferFailed, match="allowance"):
            compute_token_purchase(view, ADDRESS, "alice", USDC, 2)

    def test_balance_too_low(self):
        view = _view(token_price=10_000_000, allowance=10**12)
        with pytest.raises(TokenTransferFailed, match="balance"):
            compute_token_purchase(view, ADDRESS, "alice", USDC, 6)

    def test_token_without_price_is_paused(self):
        with pytest.raises(InvalidPrice):
            compute_token_purchase(_view(allowance=10**12), ADDRESS, "alice", USDC, 1)


class TestMutators:

    def test_set_price(self):
        pending = compute_set_price(_view(), ADDRESS, "creator", 5)
        (sc,) = pending.state_changes
        assert sc.changed_fields() == {"price_eth_wei": (PRICE, 5), "nonce": (0, 1)}
        assert pending.origin.event_type == "SET_PRICE"
        assert pending.events[0].name == "PriceUpdated"

    def test_set_price_negative(self):
        with pytest.raises(ValueError):
            compute_set_price(_view(), ADDRESS, "creator", -1)

    @pytest.mark.parametrize("price", [0.5, 1.5, True, Decimal("2"), "3", MAX_AMOUNT + 1])
    def test_prices_must_be_whole_minor_units(self, price):
        with pytest.raises(ValueError, match="non-negative integer"):
            compute_set_price(_view(), ADDRESS, "creator", price)
        with pytest.raises(ValueError, match="non-negative integer"):
            compute_set_token_price(_view(), ADDRESS, "creator", USDC, price)

    def test_largest_price_accepted(self):
        pending = compute_set_price(_view(), ADDRESS, "creator", MAX_AMOUNT)
        assert pending.state_changes[0].new_state["price_eth_wei"] == MAX_AMOUNT

    def test_set_token_price_requires_registered_token(self):
        with pytest.raises(KeyError):
            compute_set_token_price(_view(), ADDRESS, "creator", "0xunknown", 1)

    def test_native_currency_is_not_a_token(self):
        with pytest.raises(ValueError, match="not a fungible token"):
            compute_set_token_price(_view(), ADDRESS, "creator", NATIVE_SYMBOL, 1)

    def test_set_token_price(self):
        pending = compute_set_token_price(_view(), ADDRESS, "creator", USDC, 7)
        assert pending.state_changes[0].new_state["price_by_token"] == {USDC: 7}

    @pytest.mark.parametrize("bps", [-1, 10_001])
    def test_proposer_fee_out_of_range(self, bps):
        with pytest.raises(InvalidFeeBps):
            compute_set_proposer_fee_bps(_view(), ADDRESS, "creator", bps)

    def test_transfer_ownership_to_zero_rejected(self):
        with pytest.raises(ValueError, match="zero address"):
            compute_transfer_ownership(_view(), ADDRESS, "creator", ZERO_ADDRESS)

    def test_owner_mutators_reject_authority(self):
        view = _view()
        with pytest.raises(OwnershipViolation):
            compute_set_price(view, ADDRESS, "relayer", 1)
        with pytest.raises(OwnershipViolation):
            compute_set_proposer_fee_bps(view, ADDRESS, "relayer", 1)
        with pytest.raises(OwnershipViolation):
            compute_transfer_ownership(view, ADDRESS, "relayer", "relayer")

    def test_authority_mutators_reject_owner(self):
        view = _view()
        with pytest.raises(AuthorityViolation):
            compute_set_content_pointer(view, ADDRESS, "creator", "ipfs://y")
        with pytest.raises(AuthorityViolation):
            compute_set_current_proposer(view, ADDRESS, "creator", "proposer")

    def test_clear_proposer_with_none(self):
        pending = compute_set_current_proposer(_view(proposer="proposer"), ADDRESS, "relayer", None)
        assert pending.state_changes[0].new_state["current_proposer"] == ZERO_ADDRESS
        assert pending.events[0].params_dict == {"proposer": ZERO_ADDRESS}

    def test_cid_is_opaque(self):
        pending = compute_set_content_pointer(_view(), ADDRESS, "relayer", "")
        assert pending.state_changes[0].new_state["cid"] == ""

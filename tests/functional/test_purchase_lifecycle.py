"""
test_purchase_lifecycle.py - End-to-end experience lifecycle tests

Tests complete experience lifecycles:
- Deploy, price, sell with and without a proposer
- Proposer rotation by the relayer between sales
- Ownership hand-over and repricing
- Mixed native-currency and token sales
- Reconstructing the history with clone_at() and replay()
"""

from datetime import datetime, timedelta
from decimal import Decimal

from passledger import (
    ExperienceFactory, Experience, fungible_token, fund, approve,
    NATIVE_SYMBOL, SYSTEM_WALLET,
)

from tests.helpers import ETH, PRICE, USDC, USDC_PRICE, make_ledger, snapshot, deltas


T0 = datetime(2025, 1, 1)


class TestExperienceLifecycle:

    def test_full_lifecycle(self):
        ledger = make_ledger()
        factory = ExperienceFactory(ledger, "platform", 500)

        # Day 0: deploy and open sales
        exp = factory.create_experience("creator", "ipfs://v1", "relayer", 1000)
        exp.set_price("creator", PRICE)
        wallets = ("platform", "creator", "p1", "p2", "heir")
        start = snapshot(ledger, wallets)

        # Day 1: two sales, no proposer yet
        ledger.advance_time(T0 + timedelta(days=1))
        exp.buy_with_native_currency("alice", 2, 2 * PRICE)
        exp.buy_with_native_currency("bob", 1, PRICE)

        # Day 2: relayer syncs the winning proposal
        ledger.advance_time(T0 + timedelta(days=2))
        exp.set_content_pointer("relayer", "ipfs://v2")
        exp.set_current_proposer("relayer", "p1")
        exp.buy_with_native_currency("carol", 4, 4 * PRICE)

        # Day 3: a new proposal wins; owner raises the proposer fee
        ledger.advance_time(T0 + timedelta(days=3))
        exp.set_current_proposer("relayer", "p2")
        exp.set_proposer_fee_bps("creator", 2000)
        exp.buy_with_native_currency("alice", 1, PRICE)

        # Day 4: creator hands over the experience; new owner reprices
        ledger.advance_time(T0 + timedelta(days=4))
        exp.transfer_ownership("creator", "heir")
        exp.set_price("heir", 2 * PRICE)
        exp.buy_with_native_currency("bob", 1, 2 * PRICE)

        change = deltas(start, snapshot(ledger, wallets))
        assert change == {
            # 5% of 0.03 + 0.04 + 0.01 + 0.02 ETH
            "platform": 5 * 10**15,
            # 95% of 0.03 (day 1) + 85% of 0.04 (day 2) + 75% of 0.01 (day 3)
            "creator": 285 * 10**14 + 34 * 10**15 + 75 * 10**14,
            "p1": 4 * 10**15,
            # 20% of 0.01 (day 3) + 20% of 0.02 (day 4)
            "p2": 6 * 10**15,
            # 75% of 0.02
            "heir": 15 * 10**15,
        }
        assert sum(change.values()) == 10 * PRICE

        assert {b: exp.balance_of(b) for b in ("alice", "bob", "carol")} == {
            "alice": 3, "bob": 2, "carol": 4,
        }
        assert exp.total_sold == 9
        assert exp.cid == "ipfs://v2"
        assert ledger.verify_double_entry()["valid"]

        names = [e.name for e in ledger.get_events(emitter=exp.address)]
        assert names.count("Bought") == 5
        assert names.count("ProposerUpdated") == 2
        assert "OwnershipTransferred" in names

        # History
        day2 = Experience(ledger.clone_at(T0 + timedelta(days=2)), exp.address)
        assert day2.current_proposer == "p1"
        assert day2.owner == "creator"
        assert day2.total_sold == 7
        assert day2.balance_of("alice") == 2

        replayed = ledger.replay()
        assert Experience(replayed, exp.address).state == exp.state
        for wallet in wallets:
            assert replayed.get_balance(wallet, NATIVE_SYMBOL) == ledger.get_balance(wallet, NATIVE_SYMBOL)

    def test_mixed_currency_sales(self):
        ledger = make_ledger()
        ledger.register_unit(fungible_token(USDC, "USD Coin", decimals=6))
        ledger.execute(fund(ledger, "alice", 1_000_000_000, USDC))

        factory = ExperienceFactory(ledger, "platform", 250)
        exp = factory.create_experience("creator", "ipfs://mixed", "relayer", 500)
        exp.set_price("creator", PRICE)
        exp.set_token_price("creator", USDC, USDC_PRICE)
        exp.set_current_proposer("relayer", "p1")

        ledger.execute(approve(ledger, USDC, "alice", exp.address, 5 * USDC_PRICE))
        exp.buy_with_token("alice", USDC, 5)
        exp.buy_with_native_currency("bob", 3, 3 * PRICE)

        assert exp.balance_of("alice") == 5
        assert exp.balance_of("bob") == 3
        # 2.5% platform, 5% proposer of 50 USDC
        assert ledger.get_balance("platform", USDC) == Decimal(1_250_000)
        assert ledger.get_balance("p1", USDC) == Decimal(2_500_000)
        assert ledger.get_balance("creator", USDC) == Decimal(46_250_000)
        assert ledger.get_balance("creator", NATIVE_SYMBOL) == Decimal(3 * PRICE * 925 // 1000)
        assert ledger.get_balance(SYSTEM_WALLET, exp.passes.symbol) == Decimal(-8)
        assert ledger.verify_double_entry()["valid"]

    def test_two_experiences_share_platform_wallet(self):
        ledger = make_ledger()
        factory = ExperienceFactory(ledger, "platform", 1000)
        first = factory.create_experience("c1", "ipfs://1", "relayer", 0)
        second = factory.create_experience("c2", "ipfs://2", "relayer", 0)
        for exp in (first, second):
            exp.set_price(exp.owner, 10**17)

        first.buy_with_native_currency("alice", 1, 10**17)
        second.buy_with_native_currency("alice", 2, 2 * 10**17)

        assert ledger.get_balance("platform", NATIVE_SYMBOL) == Decimal(3 * 10**16)
        assert ledger.get_balance("c1", NATIVE_SYMBOL) == Decimal(9 * 10**16)
        assert ledger.get_balance("c2", NATIVE_SYMBOL) == Decimal(18 * 10**16)
        assert ledger.get_balance("alice", NATIVE_SYMBOL) == Decimal(10 * ETH - 3 * 10**17)
        assert (first.balance_of("alice"), second.balance_of("alice")) == (1, 2)

"""
conftest.py - Shared pytest fixtures for passledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Ledgers with the native currency and funded wallets
- A factory and a priced experience (0.01 ETH, 5% platform, 10% proposer)
- A token-enabled ledger for the token payment path
"""

import pytest

from passledger import ExperienceFactory, fungible_token, fund, approve

from tests.helpers import (
    PLATFORM_FEE_BPS, USDC, USDC_PRICE,
    make_ledger, make_experience,
)


@pytest.fixture
def ledger():
    """Ledger with ETH and three funded buyers."""
    return make_ledger()


@pytest.fixture
def factory(ledger):
    """Factory with a 5% platform fee paid to 'platform'."""
    return ExperienceFactory(ledger, "platform", PLATFORM_FEE_BPS)


@pytest.fixture
def experience(ledger):
    """Experience priced at 0.01 ETH with a 10% proposer fee and no proposer."""
    return make_experience(ledger)


@pytest.fixture
def proposed_experience(experience):
    """Experience whose relayer has elected 'proposer'."""
    experience.set_current_proposer("relayer", "proposer")
    return experience


@pytest.fixture
def token_ledger(ledger):
    """Ledger with USDC registered and 1,000 USDC for alice and bob."""
    ledger.register_unit(fungible_token(USDC, "USD Coin", decimals=6))
    for buyer in ("alice", "bob"):
        ledger.execute(fund(ledger, buyer, 1_000_000_000, USDC))
    return ledger


@pytest.fixture
def token_experience(token_ledger):
    """Experience selling passes for 10 USDC; alice approved 100 USDC."""
    exp = make_experience(token_ledger)
    exp.set_token_price("creator", USDC, USDC_PRICE)
    token_ledger.execute(approve(token_ledger, USDC, "alice", exp.address, 100_000_000))
    return exp

#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Selling Experience Passes Step by Step

A walk through one experience, from deployment to historical reconstruction.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Setup        - The ledger, funded buyers, the factory
  4-6:  Selling      - Pricing, the payout split, the proposer share
  7-8:  Guards       - Role checks, soulbound passes, named failures
  9-10: History      - clone_at(), replay() and the conservation check

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import sys

from passledger import (
    Ledger, ExperienceFactory, Experience,
    native_currency, fund,
    NATIVE_SYMBOL, PASS_ID,
    ExperienceError, TransfersDisabled,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1, 9, 0, 0)

    # Funding (wei)
    buyer_funding: int = 10**18

    # Experience terms
    platform_fee_bps: int = 500
    proposer_fee_bps: int = 1000
    price_wei: int = 10**16


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def eth(wei) -> str:
    return f"{int(wei) / 10**18:.4f} ETH"


def show_balances(ledger: Ledger, wallets):
    for w in wallets:
        bal = ledger.get_balance(w, NATIVE_SYMBOL) if ledger.is_registered(w) else 0
        print(f"  {w:<10} {eth(bal)}")


# ============================================================================
# PHASE 1: SETUP
# ============================================================================

def step_01_ledger() -> Ledger:
    step_header(1, "The Ledger",
        "Every experience settles on one ledger that records who owns what.")

    print("""
    The ledger holds balances of UNITS in WALLETS. The native currency is a
    unit; each experience's passes are another. The system wallet issues
    value, so the sum over all wallets of any unit is always zero.
    """)
    wait_for_enter()

    ledger = Ledger("tutorial", initial_time=CONFIG.start_time, verbose=True)
    ledger.register_unit(native_currency())
    return ledger


def step_02_fund_buyers(ledger: Ledger):
    step_header(2, "Funding Buyers",
        "Value enters through the system wallet.")
    wait_for_enter()

    for buyer in ("alice", "bob"):
        ledger.register_wallet(buyer)
        ledger.execute(fund(ledger, buyer, CONFIG.buyer_funding))

    section_header("Balances")
    show_balances(ledger, ("alice", "bob", "system"))


def step_03_factory(ledger: Ledger) -> Experience:
    step_header(3, "Deploying an Experience",
        "The factory fixes the platform wallet and fee for everything it deploys.")

    print("""
    createExperience(creator, cid, flow_sync_authority, proposer_fee_bps)
    registers a pass unit whose state is the experience's term sheet and
    emits ExperienceCreated for off-ledger indexers.
    """)
    wait_for_enter()

    factory = ExperienceFactory(ledger, "platform", CONFIG.platform_fee_bps)
    exp = factory.create_experience("creator", "ipfs://tour", "relayer", CONFIG.proposer_fee_bps)

    section_header("Term Sheet")
    for key, value in exp.state.items():
        print(f"  {key:<20} {value}")
    return exp


# ============================================================================
# PHASE 2: SELLING
# ============================================================================

def step_04_pricing(exp: Experience):
    step_header(4, "Opening Sales",
        "A price of zero means sales are paused.")
    wait_for_enter()

    try:
        exp.buy_with_native_currency("alice", 1, 0)
    except ExperienceError as e:
        print(f"  Purchase while paused: {type(e).__name__}: {e}")

    exp.set_price("creator", CONFIG.price_wei)
    print(f"  Price is now {eth(exp.price_eth_wei)} per pass")


def step_05_first_sale(ledger: Ledger, exp: Experience):
    step_header(5, "The Payout Split",
        "Platform and proposer shares are floored; the creator gets the remainder.")
    wait_for_enter()

    print(f"  Quote for 3 passes: {exp.quote(3)}")
    exp.buy_with_native_currency("alice", 3, 3 * exp.price_eth_wei)

    section_header("Balances (no proposer: the proposer share stays with the creator)")
    show_balances(ledger, ("alice", "platform", "creator"))
    print(f"\n  alice holds {exp.balance_of('alice', PASS_ID)} passes")


def step_06_proposer(ledger: Ledger, exp: Experience):
    step_header(6, "The Proposer Share",
        "The relayer records the winning proposer; later sales pay them.")
    wait_for_enter()

    ledger.advance_time(CONFIG.start_time + timedelta(days=1))
    exp.set_current_proposer("relayer", "proposer")
    exp.buy_with_native_currency("bob", 2, 2 * exp.price_eth_wei)

    section_header("Balances")
    show_balances(ledger, ("bob", "platform", "proposer", "creator"))


# ============================================================================
# PHASE 3: GUARDS
# ============================================================================

def step_07_roles(exp: Experience):
    step_header(7, "Role Checks",
        "The owner sets prices and fees; the relayer sets cid and proposer.")
    wait_for_enter()

    attempts = [
        ("bob sets the price", lambda: exp.set_price("bob", 1)),
        ("creator sets the cid", lambda: exp.set_content_pointer("creator", "ipfs://x")),
        ("alice overpays", lambda: exp.buy_with_native_currency("alice", 1, 2 * exp.price_eth_wei)),
        ("bob buys zero passes", lambda: exp.buy_with_native_currency("bob", 0, 0)),
    ]
    for label, attempt in attempts:
        try:
            attempt()
        except ExperienceError as e:
            print(f"  {label:<22} -> {type(e).__name__}")


def step_08_soulbound(exp: Experience):
    step_header(8, "Soulbound Passes",
        "Passes are minted to buyers and can never move again.")
    wait_for_enter()

    try:
        exp.safe_transfer_from("alice", "alice", "bob", PASS_ID, 1)
    except TransfersDisabled as e:
        print(f"  {e}")
    print(f"  alice still holds {exp.balance_of('alice')} passes")


# ============================================================================
# PHASE 4: HISTORY
# ============================================================================

def step_09_time_travel(ledger: Ledger, exp: Experience):
    step_header(9, "Time Travel",
        "clone_at() rebuilds the ledger as it was; replay() re-executes the log.")
    wait_for_enter()

    past = Experience(ledger.clone_at(CONFIG.start_time), exp.address)
    print(f"  Day 0: proposer={past.current_proposer} sold={past.total_sold}")
    print(f"  Now:   proposer={exp.current_proposer} sold={exp.total_sold}")

    replayed = Experience(ledger.replay(), exp.address)
    print(f"  Replayed term sheet matches: {replayed.state == exp.state}")


def step_10_conservation(ledger: Ledger):
    step_header(10, "Conservation",
        "Every unit nets to zero across all wallets.")
    wait_for_enter()

    report = ledger.verify_double_entry()
    for unit, supply in report['supplies'].items():
        print(f"  {unit:<50} {supply}")
    print(f"\n  Valid: {report['valid']}")

    section_header("Events")
    for event in ledger.get_events():
        print(f"  {event}")
    return report


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       PASSLEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    ledger = step_01_ledger()
    step_02_fund_buyers(ledger)
    exp = step_03_factory(ledger)
    step_04_pricing(exp)
    step_05_first_sale(ledger, exp)
    step_06_proposer(ledger, exp)
    step_07_roles(exp)
    step_08_soulbound(exp)
    step_09_time_travel(ledger, exp)
    report = step_10_conservation(ledger)

    print("\nTutorial complete.")
    return report


if __name__ == "__main__":
    main()

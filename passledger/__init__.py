"""
passledger - Settlement ledger for token-gated experiences

Creators deploy experiences through a factory; each experience sells
soulbound access passes for the native currency or fungible tokens and
splits every payment between the platform, the current proposer and the
creator, with no minor unit lost.

Usage:
    from passledger import Ledger, ExperienceFactory, native_currency, fund, PASS_ID

    ledger = Ledger("main")
    ledger.register_unit(native_currency())
    ledger.register_wallet("alice")
    ledger.execute(fund(ledger, "alice", 10**18))

    factory = ExperienceFactory(ledger, platform_wallet="platform", platform_fee_bps=500)
    exp = factory.create_experience("creator", "ipfs://cid", "relayer", 1000)
    exp.set_price("creator", 10**16)
    exp.set_current_proposer("relayer", "proposer")

    exp.buy_with_native_currency("alice", 3, value=3 * 10**16)
    exp.balance_of("alice", PASS_ID)   # 3
"""

# Core types
from .core import (
    LedgerView,
    Move,
    Event,
    Transaction,
    PendingTransaction,
    TransactionOrigin,
    OriginType,
    build_transaction,
    make_event,
    Unit,
    UnitStateChange,
    ExecuteResult,
    LedgerError,
    InsufficientFunds,
    TransferRuleViolation,
    TransfersDisabled,
    UnitNotRegistered,
    WalletNotRegistered,
    ExperienceError,
    InvalidQuantity,
    InvalidPrice,
    PaymentMismatch,
    OwnershipViolation,
    AuthorityViolation,
    InvalidFeeBps,
    TokenTransferFailed,
    is_zero_address,
    normalize_address,
    derive_address,
    is_amount,
    SYSTEM_WALLET,
    ZERO_ADDRESS,
    BPS_DENOMINATOR,
    MAX_BPS,
    MAX_AMOUNT,
    PASS_ID,
    NATIVE_SYMBOL,
    UNIT_TYPE_NATIVE,
    UNIT_TYPE_TOKEN,
    UNIT_TYPE_ACCESS_PASS,
)

# Ledger
from .ledger import Ledger

# Split calculator
from .split import Split, compute_split

# Access control
from .access import (
    require_owner,
    require_flow_sync_authority,
    reject_transfer,
    soulbound_transfer_rule,
)

# Units
from .units import (
    native_currency,
    fungible_token,
    fund,
    approve,
    allowance,
    AccessPass,
    create_pass_unit,
    pass_symbol,
)

# Experiences
from .experience import (
    Experience,
    initial_state,
    get_experience_state,
    check_fee_bps,
    quote,
    compute_purchase,
    compute_token_purchase,
    compute_set_price,
    compute_set_token_price,
    compute_set_proposer_fee_bps,
    compute_transfer_ownership,
    compute_set_content_pointer,
    compute_set_current_proposer,
)

# Factory
from .factory import ExperienceFactory

__all__ = [
    # Core
    'LedgerView', 'Move', 'Event', 'Transaction', 'PendingTransaction',
    'TransactionOrigin', 'OriginType', 'build_transaction',
    'make_event', 'Unit', 'UnitStateChange', 'ExecuteResult',
    # Errors
    'LedgerError', 'InsufficientFunds', 'TransferRuleViolation', 'TransfersDisabled',
    'UnitNotRegistered', 'WalletNotRegistered', 'ExperienceError', 'InvalidQuantity', 'InvalidPrice',
    'PaymentMismatch', 'OwnershipViolation', 'AuthorityViolation', 'InvalidFeeBps',
    'TokenTransferFailed',
    # Addresses and constants
    'is_zero_address', 'normalize_address', 'derive_address', 'is_amount',
    'SYSTEM_WALLET', 'ZERO_ADDRESS', 'BPS_DENOMINATOR', 'MAX_BPS', 'MAX_AMOUNT', 'PASS_ID',
    'NATIVE_SYMBOL', 'UNIT_TYPE_NATIVE', 'UNIT_TYPE_TOKEN', 'UNIT_TYPE_ACCESS_PASS',
    # Ledger
    'Ledger',
    # Split
    'Split', 'compute_split',
    # Access control
    'require_owner', 'require_flow_sync_authority', 'reject_transfer',
    'soulbound_transfer_rule',
    # Units
    'native_currency', 'fungible_token', 'fund', 'approve', 'allowance',
    'AccessPass', 'create_pass_unit', 'pass_symbol',
    # Experiences
    'Experience', 'initial_state', 'get_experience_state', 'check_fee_bps', 'quote',
    'compute_purchase', 'compute_token_purchase', 'compute_set_price',
    'compute_set_token_price', 'compute_set_proposer_fee_bps',
    'compute_transfer_ownership', 'compute_set_content_pointer',
    'compute_set_current_proposer',
    # Factory
    'ExperienceFactory',
]

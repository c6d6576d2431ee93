"""
Units module - Factory functions for the units an experience settles in.

- Payment units: native currency and fungible tokens, with issuance and
  spender allowances
- Access passes: the soulbound, mint-only unit each experience sells

All unit factories and related functions are re-exported here for convenience.
"""

# Payment units
from .currency import (
    native_currency,
    fungible_token,
    fund,
    approve,
    allowance,
)

# Access passes
from .access_pass import (
    AccessPass,
    create_pass_unit,
    pass_symbol,
)

__all__ = [
    # Payment units
    'native_currency',
    'fungible_token',
    'fund',
    'approve',
    'allowance',
    # Access passes
    'AccessPass',
    'create_pass_unit',
    'pass_symbol',
]

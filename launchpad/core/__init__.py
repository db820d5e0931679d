"""
Core primitives: byte cursor, address derivation, price oracle.
"""
from .cursor import ByteCursor
from .pda import (
    derive,
    derive_pool_address,
    derive_associated_token_account,
    find_program_address,
    is_on_curve,
    pubkey_bytes,
    pubkey_str,
    to_pubkey,
)
from .pricing import price, price_per_token, BC_K_CONST, AMM_K_CONST

__all__ = [
    'ByteCursor',
    'derive', 'derive_pool_address', 'derive_associated_token_account',
    'find_program_address', 'is_on_curve', 'pubkey_bytes', 'pubkey_str', 'to_pubkey',
    'price', 'price_per_token', 'BC_K_CONST', 'AMM_K_CONST',
]

"""
Program Derived Address (PDA) derivation.

Thin layer over ``solders.pubkey.Pubkey``: seed checks happen here so a bad
seed surfaces as ``ValueError`` instead of a panic inside the extension.

Addresses are handled as base58 strings throughout the package.
"""

from typing import List, Optional, Tuple, Union

import base58
from solders.pubkey import Pubkey

from ..config import ASSOCIATED_TOKEN_PROGRAM_ID, POOL_SEED, PROGRAM_ID, TOKEN_2022_PROGRAM_ID

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16

AddressLike = Union[str, bytes, Pubkey]


def to_pubkey(address: AddressLike) -> Pubkey:
    """Pubkey from a base58 string, 32 raw bytes, or a Pubkey."""
    if isinstance(address, Pubkey):
        return address
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    else:
        raw = base58.b58decode(address)
    if len(raw) != 32:
        raise ValueError(f"Address must be 32 bytes, got {len(raw)}")
    return Pubkey.from_bytes(raw)


def pubkey_bytes(address: AddressLike) -> bytes:
    return bytes(to_pubkey(address))


def pubkey_str(raw: Union[bytes, Pubkey]) -> str:
    return str(to_pubkey(raw))


def is_on_curve(point: AddressLike) -> bool:
    """True if the 32 bytes decompress to an ed25519 point."""
    return to_pubkey(point).is_on_curve()


def _check_seeds(seeds: List[bytes]) -> None:
    # one slot is reserved for the bump
    if len(seeds) > MAX_SEEDS - 1:
        raise ValueError("Too many seeds")
    for seed in seeds:
        if len(seed) > MAX_SEED_LENGTH:
            raise ValueError(f"Seed longer than {MAX_SEED_LENGTH} bytes")


def find_program_address(seeds: List[bytes], program_id: AddressLike) -> Tuple[Pubkey, int]:
    """
    Bump-seed search.

    Returns:
        (address, bump)

    Raises:
        ValueError: invalid seeds or program id
    """
    seeds = [bytes(seed) for seed in seeds]
    _check_seeds(seeds)
    return Pubkey.find_program_address(seeds, to_pubkey(program_id))


def derive(program_id: AddressLike, seeds: List[bytes]) -> Tuple[Optional[str], bool]:
    """
    Derive a PDA without ever raising.

    Returns:
        (address, found) - address is None when found is False
    """
    try:
        address, _ = find_program_address(seeds, program_id)
    except (ValueError, TypeError):
        return None, False
    return str(address), True


def derive_pool_address(mint: AddressLike, program_id: AddressLike = PROGRAM_ID) -> Tuple[Optional[str], bool]:
    """Pool (bonding curve) PDA for a mint: seeds ["bonding_curve", mint]."""
    try:
        mint_raw = pubkey_bytes(mint)
    except ValueError:
        return None, False
    return derive(program_id, [POOL_SEED, mint_raw])


def derive_associated_token_account(
    owner: AddressLike,
    mint: AddressLike,
    token_program_id: AddressLike = TOKEN_2022_PROGRAM_ID,
) -> str:
    """Associated token account for (owner, mint). Owner may be off-curve."""
    address, _ = find_program_address(
        [pubkey_bytes(owner), pubkey_bytes(token_program_id), pubkey_bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return str(address)

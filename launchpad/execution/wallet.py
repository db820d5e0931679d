"""
Signing key loading.

Accepts the formats wallets export: a JSON keyfile (array of 64 ints),
a base58 secret key, or a hex secret key / seed. The key itself is a
``solders.keypair.Keypair``.
"""

import json
import logging
import string
from pathlib import Path
from typing import Union

import base58
from solders.keypair import Keypair

from ..errors import ConfigError

logger = logging.getLogger(__name__)


def keypair_from_secret(secret: bytes) -> Keypair:
    """64-byte secret (seed || public key) or a bare 32-byte seed."""
    secret = bytes(secret)
    if len(secret) == 32:
        return Keypair.from_seed(secret)
    if len(secret) != 64:
        raise ValueError(f"Secret key must be 32 or 64 bytes, got {len(secret)}")
    if bytes(Keypair.from_seed(secret[:32]).pubkey()) != secret[32:]:
        raise ValueError("Secret key public half does not match its seed")
    return Keypair.from_bytes(secret)


def keypair_from_file(path: Union[str, Path]) -> Keypair:
    with open(Path(path).expanduser()) as f:
        secret = json.load(f)
    return keypair_from_secret(bytes(secret))


def load_keypair(value: str) -> Keypair:
    """
    Load a keypair from a keyfile path, hex string or base58 string.

    Raises:
        ConfigError: value is not a usable key in any supported format
    """
    value = value.strip()
    try:
        path = Path(value).expanduser()
        if path.is_file():
            return keypair_from_file(path)
        if all(c in string.hexdigits for c in value) and len(value) in (64, 128):
            return keypair_from_secret(bytes.fromhex(value))
        return keypair_from_secret(base58.b58decode(value))
    except (ValueError, TypeError, OSError) as e:
        logger.error("Invalid private key")
        raise ConfigError("Invalid private key format. Use a keyfile, hex or base58") from e

"""
Launchpad Configuration
=======================

Program constants and the single runtime config shared by the read path
(event stream) and the write path (trader / submitter).
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional

from .errors import ConfigError


# Launchpad program constants
PROGRAM_ID = "2w6PMUmTbdyiSRo9RRXxugUMWNYcyT67icEg9wjGSrND"
FEE_RECEIVER = "4funijKNacePEenVnhCVrRL68Brq7x2VAgefPX6UNPiw"
POOL_SEED = b"bonding_curve"

# System programs
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"

# Units
LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_DECIMALS = 1_000_000

# Bonding curve defaults
BC_TOTAL_SUPPLY = 1_000_000_000_000_000
TOTAL_SUPPLY_FOR_MARKET_CAP = 1_000_000_000
DEFAULT_VIRTUAL_SOL = 20_000_000_000
DEFAULT_VIRTUAL_SOL_MODE_1 = 75_000_000_000

# Domain instruction discriminants
BUY_DISCRIMINANT = 1
SELL_DISCRIMINANT = 2

LOG_DATA_MARKER = "Program data: "

U64_MAX = 2**64 - 1

COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


def _ws_from_http(url: str) -> str:
    if url.startswith("https://"):
        return "wss://" + url[len("https://"):]
    if url.startswith("http://"):
        return "ws://" + url[len("http://"):]
    return url


@dataclass
class LaunchpadConfig:
    """
    Runtime configuration.

    Everything that talks to the network reads from one instance of this,
    so the stream and the trader always agree on endpoint and commitment.
    """

    # === Endpoints ===
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    ws_url: Optional[str] = None            # derived from rpc_url when unset
    commitment: str = "confirmed"
    request_timeout: float = 15.0           # per JSON-RPC call

    # === Program ===
    program_id: str = PROGRAM_ID
    fee_receiver: str = FEE_RECEIVER

    # === Transaction building ===
    compute_unit_limit: int = 200_000
    compute_unit_price: int = 5_000         # micro-lamports per CU
    min_out: int = 0                        # no slippage floor by default

    # === Submission ===
    rebroadcast_interval: float = 2.0       # seconds between resends
    confirmation_timeout: float = 60.0
    confirmation_poll_interval: float = 0.5

    # === Stream ===
    reconnect_delay: float = 5.0

    def __post_init__(self):
        if not self.ws_url:
            self.ws_url = _ws_from_http(self.rpc_url)
        if self.commitment not in COMMITMENT_LEVELS:
            raise ConfigError(
                f"commitment must be one of {', '.join(COMMITMENT_LEVELS)}, got {self.commitment!r}"
            )
        if self.rebroadcast_interval <= 0:
            raise ConfigError("rebroadcast_interval must be positive")
        if self.confirmation_timeout <= 0:
            raise ConfigError("confirmation_timeout must be positive")
        if not 0 <= self.min_out <= U64_MAX:
            raise ConfigError("min_out must fit in an unsigned 64-bit integer")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'LaunchpadConfig':
        """Build config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        mapping: Dict[str, Callable[[str], Any]] = {
            'RPC_URL': str,
            'WS_URL': str,
            'COMMITMENT': str,
            'COMPUTE_UNIT_LIMIT': int,
            'COMPUTE_UNIT_PRICE': int,
            'MIN_OUT': int,
            'REBROADCAST_INTERVAL': float,
            'CONFIRMATION_TIMEOUT': float,
        }
        kwargs: Dict[str, Any] = {}
        for name, parse in mapping.items():
            raw = env.get(name)
            if raw is None or not raw.strip():
                continue
            try:
                kwargs[name.lower()] = parse(raw.strip())
            except ValueError as e:
                raise ConfigError(f"Invalid value for {name}: {raw!r}") from e
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Default configuration
DEFAULT_CONFIG = LaunchpadConfig()

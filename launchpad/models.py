"""
Launchpad Models - Shared Data Structures
=========================================

Typed events produced by the decoder and the records exchanged on the
write path. Raw on-chain integers are kept as ``int``; the ``*_ui``
properties convert to whole SOL / whole tokens for display only.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from .config import LAMPORTS_PER_SOL, TOKEN_DECIMALS


class EventKind(Enum):
    POOL_CREATED = "POOL_CREATED"
    TRADE = "TRADE"
    PHASE_CHANGE = "PHASE_CHANGE"
    UNRECOGNIZED = "UNRECOGNIZED"


class Phase(Enum):
    BC = "BC"
    AMM = "AMM"

    @classmethod
    def from_byte(cls, value: int) -> 'Phase':
        return cls.BC if value == 0 else cls.AMM


class TradeSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def from_byte(cls, value: int) -> 'TradeSide':
        return cls.BUY if value == 1 else cls.SELL


@dataclass(frozen=True)
class PricingResult:
    """Output of the price oracle (SOL per whole token)."""
    price_per_token: float
    market_cap_sol: float
    total_supply: int
    phase: Phase


@dataclass(frozen=True)
class PoolCreatedPayload:
    mint: str
    creator: str
    name: str
    symbol: str
    uri: str
    mode: int
    initial_buy: int
    total_supply: int
    virtual_sol: int
    virtual_tokens: int
    pool_address: Optional[str]
    price_per_token: float
    market_cap_sol: float
    circulating_supply: int

    def to_dict(self) -> dict:
        return {
            'mint': self.mint,
            'pool_address': self.pool_address,
            'creator': self.creator,
            'name': self.name,
            'symbol': self.symbol,
            'uri': self.uri,
            'mode': self.mode,
            'initial_buy': self.initial_buy,
            'total_supply': self.total_supply,
            'virtual_sol': self.virtual_sol,
            'virtual_tokens': self.virtual_tokens,
            'price_per_token': self.price_per_token,
            'market_cap_sol': self.market_cap_sol,
            'circulating_supply': self.circulating_supply,
        }


@dataclass(frozen=True)
class TradePayload:
    trader: str
    mint: str
    pool_address: Optional[str]
    side: TradeSide
    sol_amount: int             # lamports
    token_amount: int           # raw token units
    phase: Phase
    phase_byte: int
    reported_price: int         # on-wire price field, superseded by price_per_token
    token_reserves: int
    sol_reserves: int
    price_per_token: float
    market_cap_sol: float
    circulating_supply: int

    @property
    def is_buy(self) -> bool:
        return self.side is TradeSide.BUY

    @property
    def sol_amount_ui(self) -> float:
        return self.sol_amount / LAMPORTS_PER_SOL

    @property
    def token_amount_ui(self) -> float:
        return self.token_amount / TOKEN_DECIMALS

    @property
    def sol_reserves_ui(self) -> float:
        return self.sol_reserves / LAMPORTS_PER_SOL

    @property
    def token_reserves_ui(self) -> float:
        return self.token_reserves / TOKEN_DECIMALS

    def to_dict(self) -> dict:
        return {
            'pool_address': self.pool_address,
            'mint': self.mint,
            'trader': self.trader,
            'side': self.side.value,
            'sol_amount': self.sol_amount,
            'sol_amount_ui': self.sol_amount_ui,
            'token_amount': self.token_amount,
            'token_amount_ui': self.token_amount_ui,
            'phase': self.phase.value,
            'price_per_token': self.price_per_token,
            'market_cap_sol': self.market_cap_sol,
            'circulating_supply': self.circulating_supply,
            'token_reserves': self.token_reserves,
            'token_reserves_ui': self.token_reserves_ui,
            'sol_reserves': self.sol_reserves,
            'sol_reserves_ui': self.sol_reserves_ui,
        }


@dataclass(frozen=True)
class PhaseChangePayload:
    mint: str
    pool_address: Optional[str]
    old_phase: Phase
    new_phase: Phase
    threshold_amount: int       # lamports
    old_phase_byte: int = 0
    new_phase_byte: int = 1

    @property
    def threshold_sol(self) -> float:
        return self.threshold_amount / LAMPORTS_PER_SOL

    def to_dict(self) -> dict:
        return {
            'mint': self.mint,
            'pool_address': self.pool_address,
            'old_phase': self.old_phase.value,
            'new_phase': self.new_phase.value,
            'old_phase_byte': self.old_phase_byte,
            'new_phase_byte': self.new_phase_byte,
            'threshold_amount': self.threshold_amount,
            'threshold_sol': self.threshold_sol,
        }


@dataclass(frozen=True)
class UnrecognizedPayload:
    discriminant: int
    raw: bytes

    def to_dict(self) -> dict:
        return {'discriminant': self.discriminant, 'raw': self.raw.hex()}


EventPayload = Union[PoolCreatedPayload, TradePayload, PhaseChangePayload, UnrecognizedPayload]


@dataclass(frozen=True)
class EventEnvelope:
    """One decoded event, as handed to subscribers."""
    kind: EventKind
    signature: str
    slot: int
    payload: EventPayload
    observed_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            'type': self.kind.value,
            'signature': self.signature,
            'slot': self.slot,
            'timestamp': self.observed_at,
            'data': self.payload.to_dict(),
        }


@dataclass(frozen=True)
class TradeIntent:
    """Caller intent: amount is whole SOL for a buy, whole tokens for a sell."""
    mint: str
    side: TradeSide
    amount: float


@dataclass
class SubmissionAttempt:
    """
    One signed transaction in flight.

    The signed bytes never change after construction. ``cancel()`` is the
    single shared flag between the confirmation waiter and the rebroadcaster.
    """
    signature: str
    raw_transaction: bytes
    blockhash: str
    last_valid_block_height: int
    started_at: float = field(default_factory=time.time)
    rebroadcasts: int = 0
    _cancelled: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def cancel(self) -> bool:
        """Set the cancellation flag. True only for the call that set it."""
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def wait_cancelled(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True


@dataclass
class SubmissionResult:
    """Successful submission (failures are raised as SubmissionError)."""
    signature: str
    attempt: Optional[SubmissionAttempt] = None
    latency_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            'signature': self.signature,
            'latency_ms': self.latency_ms,
            'rebroadcasts': self.attempt.rebroadcasts if self.attempt else 0,
        }

"""
Inverse of the event decoder: writes the same binary layout.

Used to build fixtures and to check that decoding preserves every wire
field. Addresses may be base58 strings or 32 raw bytes.
"""

import struct
from typing import Optional, Union

from ..core.pda import AddressLike, pubkey_bytes
from ..models import (
    PhaseChangePayload,
    PoolCreatedPayload,
    Phase,
    TradePayload,
    TradeSide,
    UnrecognizedPayload,
)
from .decoder import PHASE_CHANGE, POOL_CREATED, TRADE


def _u64(value: int) -> bytes:
    return struct.pack('<Q', value)


def _string(value: str) -> bytes:
    raw = value.encode('utf-8')
    if len(raw) > 255:
        raise ValueError("String longer than 255 bytes")
    return bytes([len(raw)]) + raw


def _phase_byte(phase: Union[Phase, int]) -> int:
    if isinstance(phase, Phase):
        return 0 if phase is Phase.BC else 1
    return phase


def encode_pool_created(
    mint: AddressLike,
    creator: AddressLike,
    name: str,
    symbol: str,
    uri: str,
    mode: int,
    initial_buy: int,
    total_supply: int,
    virtual_sol: Optional[int] = None,
    virtual_tokens: Optional[int] = None,
) -> bytes:
    if virtual_tokens is not None and virtual_sol is None:
        raise ValueError("virtual_tokens cannot be written without virtual_sol")
    out = bytes([POOL_CREATED]) + pubkey_bytes(mint) + pubkey_bytes(creator)
    out += _string(name) + _string(symbol) + _string(uri)
    out += bytes([mode]) + _u64(initial_buy) + _u64(total_supply)
    if virtual_sol is not None:
        out += _u64(virtual_sol)
    if virtual_tokens is not None:
        out += _u64(virtual_tokens)
    return out


def encode_trade(
    trader: AddressLike,
    mint: AddressLike,
    side: TradeSide,
    sol_amount: int,
    token_amount: int,
    phase_byte: int,
    reported_price: int,
    token_reserves: int,
    sol_reserves: int,
) -> bytes:
    out = bytes([TRADE]) + pubkey_bytes(trader) + pubkey_bytes(mint)
    if side is TradeSide.BUY:
        out += bytes([1]) + _u64(sol_amount) + _u64(token_amount)
    else:
        out += bytes([0]) + _u64(token_amount) + _u64(sol_amount)
    out += bytes([phase_byte]) + _u64(reported_price)
    out += _u64(token_reserves) + _u64(sol_reserves)
    return out


def encode_phase_change(
    mint: AddressLike,
    old_phase: Union[Phase, int],
    new_phase: Union[Phase, int],
    threshold_amount: int,
) -> bytes:
    """Phases may be given as raw bytes to reproduce any on-wire value."""
    return (
        bytes([PHASE_CHANGE]) + pubkey_bytes(mint)
        + bytes([_phase_byte(old_phase), _phase_byte(new_phase)])
        + _u64(threshold_amount)
    )


def encode_payload(payload, include_virtual_reserves: bool = True) -> bytes:
    """Re-encode a decoded payload."""
    if isinstance(payload, PoolCreatedPayload):
        return encode_pool_created(
            payload.mint, payload.creator, payload.name, payload.symbol, payload.uri,
            payload.mode, payload.initial_buy, payload.total_supply,
            payload.virtual_sol if include_virtual_reserves else None,
            payload.virtual_tokens if include_virtual_reserves else None,
        )
    if isinstance(payload, TradePayload):
        return encode_trade(
            payload.trader, payload.mint, payload.side, payload.sol_amount,
            payload.token_amount, payload.phase_byte, payload.reported_price,
            payload.token_reserves, payload.sol_reserves,
        )
    if isinstance(payload, PhaseChangePayload):
        return encode_phase_change(
            payload.mint, payload.old_phase_byte, payload.new_phase_byte, payload.threshold_amount
        )
    if isinstance(payload, UnrecognizedPayload):
        return payload.raw
    raise TypeError(f"Cannot encode {type(payload).__name__}")

"""
Launchpad Event Decoder
=======================

Turns ``Program data: <base64>`` log lines into typed events.

Wire layout (little-endian, one leading discriminant byte):

    0  PoolCreated   mint(32) creator(32) name(str) symbol(str) uri(str)
                     mode(u8) initial_buy(u64) total_supply(u64)
                     [virtual_sol(u64)] [virtual_tokens(u64)]
    1  Trade         trader(32) mint(32) side(u8)
                     buy:  sol_amount(u64) token_amount(u64)
                     sell: token_amount(u64) sol_amount(u64)
                     phase(u8) price(u64) token_reserves(u64) sol_reserves(u64)
    4  PhaseChange   mint(32) old_phase(u8) new_phase(u8) threshold(u64)

str = u8 length + UTF-8 bytes. The two optional PoolCreated fields are
present only if 8 bytes remain; there is no presence flag.

Nothing in this module raises past ``decode``: bad buffers are logged
and dropped.
"""

import base64
import binascii
import logging
import re
from typing import Callable, Dict, Iterable, List, Optional

from ..config import (
    BC_TOTAL_SUPPLY,
    DEFAULT_VIRTUAL_SOL,
    DEFAULT_VIRTUAL_SOL_MODE_1,
    LOG_DATA_MARKER,
    PROGRAM_ID,
)
from ..core.cursor import ByteCursor
from ..core.pda import derive_pool_address
from ..core.pricing import price
from ..errors import DecodeError
from ..models import (
    EventEnvelope,
    EventKind,
    EventPayload,
    Phase,
    PhaseChangePayload,
    PoolCreatedPayload,
    TradePayload,
    TradeSide,
    UnrecognizedPayload,
)

logger = logging.getLogger(__name__)

POOL_CREATED = 0
TRADE = 1
PHASE_CHANGE = 4

_PROGRAM_DATA_RE = re.compile(re.escape(LOG_DATA_MARKER) + r"([A-Za-z0-9+/=]+)")

PAYLOAD_KINDS = {
    PoolCreatedPayload: EventKind.POOL_CREATED,
    TradePayload: EventKind.TRADE,
    PhaseChangePayload: EventKind.PHASE_CHANGE,
    UnrecognizedPayload: EventKind.UNRECOGNIZED,
}


def extract_program_data(line: str) -> Optional[str]:
    """Base64 payload after the ``Program data:`` marker, or None."""
    if not line:
        return None
    match = _PROGRAM_DATA_RE.search(line)
    return match.group(1) if match else None


class EventDecoder:
    """
    Stateless decoder. Safe to share across tasks and threads.

    Example:
        decoder = EventDecoder()
        for event in decoder.decode_logs(logs, signature, slot):
            print(event.kind, event.payload)
    """

    def __init__(self, program_id: str = PROGRAM_ID, include_unrecognized: bool = False):
        self.program_id = program_id
        self.include_unrecognized = include_unrecognized
        self._variants: Dict[int, Callable[[ByteCursor], EventPayload]] = {
            POOL_CREATED: self._decode_pool_created,
            TRADE: self._decode_trade,
            PHASE_CHANGE: self._decode_phase_change,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def decode_logs(self, logs: Iterable[str], signature: str, slot: int) -> List[EventEnvelope]:
        """Decode every data line of one transaction, preserving log order."""
        events = []
        for line in logs:
            event = self.decode_line(line, signature, slot)
            if event is not None:
                events.append(event)
        return events

    def decode_line(self, line: str, signature: str, slot: int) -> Optional[EventEnvelope]:
        encoded = extract_program_data(line)
        if encoded is None:
            return None
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.debug(f"Dropping undecodable base64 in {signature}: {e}")
            return None
        return self.decode(data, signature, slot)

    def decode(self, data: bytes, signature: str = "", slot: int = 0) -> Optional[EventEnvelope]:
        """Decode one raw buffer. Returns None for anything that is not an event."""
        payload = self.decode_payload(data, signature)
        if payload is None:
            return None
        kind = PAYLOAD_KINDS[type(payload)]
        if kind is EventKind.UNRECOGNIZED and not self.include_unrecognized:
            return None
        return EventEnvelope(kind=kind, signature=signature, slot=slot, payload=payload)

    def decode_payload(self, data: bytes, signature: str = "") -> Optional[EventPayload]:
        if not data:
            return None
        cursor = ByteCursor(data)
        discriminant = cursor.read_u8()
        variant = self._variants.get(discriminant)
        if variant is None:
            logger.debug(f"Unrecognized event discriminant {discriminant} in {signature}")
            return UnrecognizedPayload(discriminant=discriminant, raw=bytes(data))
        try:
            return variant(cursor)
        except (DecodeError, UnicodeDecodeError) as e:
            logger.debug(f"Dropping malformed event {discriminant} in {signature}: {e}")
            return None

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def _pool_address(self, mint: str) -> Optional[str]:
        address, found = derive_pool_address(mint, self.program_id)
        if not found:
            logger.debug(f"Pool address derivation failed for mint {mint}")
        return address

    def _decode_pool_created(self, cursor: ByteCursor) -> PoolCreatedPayload:
        mint = cursor.read_pubkey()
        creator = cursor.read_pubkey()
        name = cursor.read_string()
        symbol = cursor.read_string()
        uri = cursor.read_string()
        mode = cursor.read_u8()
        initial_buy = cursor.read_u64()
        total_supply = cursor.read_u64()

        virtual_sol = DEFAULT_VIRTUAL_SOL_MODE_1 if mode == 1 else DEFAULT_VIRTUAL_SOL
        virtual_tokens = BC_TOTAL_SUPPLY
        if cursor.has(8):
            virtual_sol = cursor.read_u64()
        if cursor.has(8):
            virtual_tokens = cursor.read_u64()

        pricing = price(Phase.BC, virtual_tokens, 0)
        return PoolCreatedPayload(
            mint=mint,
            creator=creator,
            name=name,
            symbol=symbol,
            uri=uri,
            mode=mode,
            initial_buy=initial_buy,
            total_supply=total_supply,
            virtual_sol=virtual_sol,
            virtual_tokens=virtual_tokens,
            pool_address=self._pool_address(mint),
            price_per_token=pricing.price_per_token,
            market_cap_sol=pricing.market_cap_sol,
            circulating_supply=pricing.total_supply,
        )

    def _decode_trade(self, cursor: ByteCursor) -> TradePayload:
        trader = cursor.read_pubkey()
        mint = cursor.read_pubkey()
        side = TradeSide.from_byte(cursor.read_u8())

        # Field order depends on side
        if side is TradeSide.BUY:
            sol_amount = cursor.read_u64()
            token_amount = cursor.read_u64()
        else:
            token_amount = cursor.read_u64()
            sol_amount = cursor.read_u64()

        phase_byte = cursor.read_u8()
        reported_price = cursor.read_u64()
        token_reserves = cursor.read_u64()
        sol_reserves = cursor.read_u64()

        phase = Phase.from_byte(phase_byte)
        pricing = price(phase, token_reserves, sol_reserves)
        return TradePayload(
            trader=trader,
            mint=mint,
            pool_address=self._pool_address(mint),
            side=side,
            sol_amount=sol_amount,
            token_amount=token_amount,
            phase=phase,
            phase_byte=phase_byte,
            reported_price=reported_price,
            token_reserves=token_reserves,
            sol_reserves=sol_reserves,
            price_per_token=pricing.price_per_token,
            market_cap_sol=pricing.market_cap_sol,
            circulating_supply=pricing.total_supply,
        )

    def _decode_phase_change(self, cursor: ByteCursor) -> PhaseChangePayload:
        mint = cursor.read_pubkey()
        old_byte = cursor.read_u8()
        new_byte = cursor.read_u8()
        threshold = cursor.read_u64()
        return PhaseChangePayload(
            mint=mint,
            pool_address=self._pool_address(mint),
            old_phase=Phase.from_byte(old_byte),
            new_phase=Phase.from_byte(new_byte),
            threshold_amount=threshold,
            old_phase_byte=old_byte,
            new_phase_byte=new_byte,
        )

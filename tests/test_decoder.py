from __future__ import annotations

import base64

import pytest

from launchpad.core.pda import derive_pool_address
from launchpad.core.pricing import price
from launchpad.events.decoder import EventDecoder, extract_program_data
from launchpad.events.encoder import (
    encode_payload,
    encode_phase_change,
    encode_pool_created,
    encode_trade,
)
from launchpad.models import EventKind, Phase, TradeSide

from conftest import CREATOR, MINT, TRADER

SIGNATURE = "5" * 88


def pool_created(**overrides) -> bytes:
    fields = dict(
        mint=MINT,
        creator=CREATOR,
        name="Test Token",
        symbol="TEST",
        uri="https://example.com/meta.json",
        mode=0,
        initial_buy=1_500_000_000,
        total_supply=1_000_000_000_000_000,
        virtual_sol=30_000_000_000,
        virtual_tokens=1_073_000_000_000_000,
    )
    fields.update(overrides)
    return encode_pool_created(**fields)


def trade(side: TradeSide, **overrides) -> bytes:
    fields = dict(
        trader=TRADER,
        mint=MINT,
        side=side,
        sol_amount=250_000_000,
        token_amount=8_000_000_000_000,
        phase_byte=0,
        reported_price=12345,
        token_reserves=800_000_000_000_000,
        sol_reserves=40_000_000_000,
    )
    fields.update(overrides)
    return encode_trade(**fields)


def log_line(data: bytes) -> str:
    return "Program data: " + base64.b64encode(data).decode()


# --- pool created -----------------------------------------------------------

def test_pool_created_decodes_all_fields() -> None:
    event = EventDecoder().decode(pool_created(), SIGNATURE, 42)

    assert event.kind is EventKind.POOL_CREATED
    assert event.signature == SIGNATURE
    assert event.slot == 42
    p = event.payload
    assert (p.mint, p.creator) == (MINT, CREATOR)
    assert (p.name, p.symbol, p.uri) == ("Test Token", "TEST", "https://example.com/meta.json")
    assert p.mode == 0
    assert p.initial_buy == 1_500_000_000
    assert p.total_supply == 1_000_000_000_000_000
    assert p.virtual_sol == 30_000_000_000
    assert p.virtual_tokens == 1_073_000_000_000_000
    assert p.pool_address == derive_pool_address(MINT)[0]
    expected = price(Phase.BC, 1_073_000_000_000_000, 0)
    assert p.price_per_token == expected.price_per_token
    assert p.market_cap_sol == expected.market_cap_sol
    assert p.circulating_supply == 1_000_000_000


def test_pool_created_round_trip_is_bit_exact() -> None:
    raw = pool_created(name="Ünïcode 🚀", symbol="UNI")
    event = EventDecoder().decode(raw)

    assert encode_payload(event.payload) == raw


@pytest.mark.parametrize("mode, expected_sol", [(0, 20_000_000_000), (1, 75_000_000_000), (2, 20_000_000_000)])
def test_truncated_pool_created_uses_mode_defaults(mode, expected_sol) -> None:
    raw = pool_created(mode=mode, virtual_sol=None, virtual_tokens=None)
    p = EventDecoder().decode(raw).payload

    assert p.virtual_sol == expected_sol
    assert p.virtual_tokens == 1_000_000_000_000_000
    assert encode_payload(p, include_virtual_reserves=False) == raw


def test_pool_created_with_only_virtual_sol() -> None:
    raw = pool_created(mode=1, virtual_sol=99_000_000_000, virtual_tokens=None)
    p = EventDecoder().decode(raw).payload

    assert p.virtual_sol == 99_000_000_000
    assert p.virtual_tokens == 1_000_000_000_000_000


def test_pool_created_partial_trailing_bytes_are_ignored() -> None:
    raw = pool_created(virtual_sol=None, virtual_tokens=None) + b"\x01\x02\x03"
    p = EventDecoder().decode(raw).payload

    assert p.virtual_sol == 20_000_000_000


# --- trade ------------------------------------------------------------------

def test_buy_reads_sol_before_tokens() -> None:
    raw = trade(TradeSide.BUY, sol_amount=111, token_amount=222)
    # sol amount sits right after the side byte
    assert raw[65] == 1
    assert int.from_bytes(raw[66:74], "little") == 111

    p = EventDecoder().decode(raw).payload
    assert p.side is TradeSide.BUY
    assert p.is_buy
    assert p.sol_amount == 111
    assert p.token_amount == 222


def test_sell_reads_tokens_before_sol() -> None:
    raw = trade(TradeSide.SELL, sol_amount=111, token_amount=222)
    assert raw[65] == 0
    assert int.from_bytes(raw[66:74], "little") == 222

    p = EventDecoder().decode(raw).payload
    assert p.side is TradeSide.SELL
    assert p.sol_amount == 111
    assert p.token_amount == 222


def test_trade_price_is_recomputed_not_taken_from_wire() -> None:
    event = EventDecoder().decode(trade(TradeSide.BUY, reported_price=1))
    p = event.payload

    assert event.kind is EventKind.TRADE
    assert p.reported_price == 1
    assert p.token_reserves == 800_000_000_000_000
    assert p.sol_reserves == 40_000_000_000
    assert p.price_per_token == price(Phase.BC, 800_000_000_000_000, 40_000_000_000).price_per_token
    assert p.trader == TRADER
    assert p.pool_address == derive_pool_address(MINT)[0]


def test_trade_nonzero_phase_is_amm() -> None:
    p = EventDecoder().decode(trade(TradeSide.SELL, phase_byte=3)).payload

    assert p.phase is Phase.AMM
    assert p.phase_byte == 3
    assert p.price_per_token == price(Phase.AMM, 800_000_000_000_000, 40_000_000_000).price_per_token


def test_trade_presentation_units() -> None:
    p = EventDecoder().decode(trade(TradeSide.BUY)).payload
    data = p.to_dict()

    assert data["sol_amount"] == 250_000_000
    assert data["sol_amount_ui"] == pytest.approx(0.25)
    assert data["token_amount_ui"] == pytest.approx(8_000_000)
    assert data["phase"] == "BC"
    assert data["side"] == "BUY"


# --- phase change -----------------------------------------------------------

def test_phase_change() -> None:
    raw = encode_phase_change(MINT, Phase.BC, Phase.AMM, 85_000_000_000)
    event = EventDecoder().decode(raw, SIGNATURE, 7)

    assert event.kind is EventKind.PHASE_CHANGE
    p = event.payload
    assert p.old_phase is Phase.BC
    assert p.new_phase is Phase.AMM
    assert p.threshold_amount == 85_000_000_000
    assert p.threshold_sol == pytest.approx(85.0)
    assert p.pool_address == derive_pool_address(MINT)[0]


# --- no-event cases ---------------------------------------------------------

@pytest.mark.parametrize("raw", [b"", bytes([2]), bytes([3, 1, 2, 3]), bytes([255]) + bytes(100)])
def test_empty_or_unknown_discriminant_yields_no_event(raw) -> None:
    assert EventDecoder().decode(raw) is None


def test_unknown_discriminant_can_be_surfaced() -> None:
    event = EventDecoder(include_unrecognized=True).decode(bytes([9, 1, 2]))

    assert event.kind is EventKind.UNRECOGNIZED
    assert event.payload.discriminant == 9
    assert event.payload.raw == bytes([9, 1, 2])


def test_empty_buffer_is_not_unrecognized() -> None:
    assert EventDecoder(include_unrecognized=True).decode(b"") is None


@pytest.mark.parametrize("cut", [1, 10, 40, 66, 67, 80, 100])
def test_truncated_trade_yields_no_event(cut) -> None:
    raw = trade(TradeSide.BUY)
    assert EventDecoder().decode(raw[:cut]) is None


@pytest.mark.parametrize("cut", [1, 33, 65, 70, 90])
def test_truncated_pool_created_yields_no_event(cut) -> None:
    assert EventDecoder().decode(pool_created()[:cut]) is None


def test_invalid_utf8_name_yields_no_event() -> None:
    raw = pool_created(name="ab")
    name_offset = 1 + 32 + 32 + 1
    broken = raw[:name_offset] + b"\xff\xfe" + raw[name_offset + 2:]
    assert EventDecoder().decode(broken) is None


# --- log lines --------------------------------------------------------------

def test_extract_program_data() -> None:
    assert extract_program_data("Program data: QUJD") == "QUJD"
    assert extract_program_data("Program log: Instruction: Buy") is None
    assert extract_program_data("") is None


def test_decode_logs_preserves_order_and_skips_noise() -> None:
    logs = [
        "Program 2w6PMUmTbdyiSRo9RRXxugUMWNYcyT67icEg9wjGSrND invoke [1]",
        log_line(pool_created()),
        "Program log: Instruction: Buy",
        log_line(trade(TradeSide.BUY)),
        "Program data: !!!not-base64!!!",
        log_line(bytes([77])),
        log_line(encode_phase_change(MINT, Phase.BC, Phase.AMM, 1)),
        "Program 2w6PMUmTbdyiSRo9RRXxugUMWNYcyT67icEg9wjGSrND success",
    ]

    events = EventDecoder().decode_logs(logs, SIGNATURE, 99)

    assert [e.kind for e in events] == [EventKind.POOL_CREATED, EventKind.TRADE, EventKind.PHASE_CHANGE]
    assert all(e.slot == 99 and e.signature == SIGNATURE for e in events)


def test_decode_line_with_bad_base64_padding() -> None:
    assert EventDecoder().decode_line("Program data: QUJ", SIGNATURE, 1) is None


def test_envelope_to_dict() -> None:
    event = EventDecoder().decode(trade(TradeSide.SELL), SIGNATURE, 5)
    data = event.to_dict()

    assert data["type"] == "TRADE"
    assert data["signature"] == SIGNATURE
    assert data["slot"] == 5
    assert data["data"]["side"] == "SELL"


def test_phase_change_keeps_raw_phase_bytes() -> None:
    raw = encode_phase_change(MINT, 0, 2, 1_000)
    p = EventDecoder().decode(raw).payload

    assert p.new_phase is Phase.AMM
    assert (p.old_phase_byte, p.new_phase_byte) == (0, 2)
    assert p.to_dict()["new_phase_byte"] == 2
    assert encode_payload(p) == raw

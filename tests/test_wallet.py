from __future__ import annotations

import json

import base58
import pytest
from solders.keypair import Keypair

from launchpad.errors import ConfigError
from launchpad.execution.wallet import keypair_from_secret, load_keypair

SEED = bytes(range(32))


def test_secret_key_is_seed_then_public_key() -> None:
    keypair = keypair_from_secret(SEED)

    assert bytes(keypair)[:32] == SEED
    assert bytes(keypair)[32:] == bytes(keypair.pubkey())
    assert base58.b58decode(str(keypair.pubkey())) == bytes(keypair.pubkey())


def test_signature_verifies() -> None:
    keypair = keypair_from_secret(SEED)
    signature = keypair.sign_message(b"message")

    assert len(bytes(signature)) == 64
    assert signature.verify(keypair.pubkey(), b"message")
    assert not signature.verify(keypair.pubkey(), b"other message")


def test_load_hex_seed_and_hex_secret() -> None:
    expected = Keypair.from_seed(SEED).pubkey()

    assert load_keypair(SEED.hex()).pubkey() == expected
    assert load_keypair(bytes(Keypair.from_seed(SEED)).hex()).pubkey() == expected


def test_load_base58_secret() -> None:
    secret = bytes(Keypair.from_seed(SEED))
    assert bytes(load_keypair(base58.b58encode(secret).decode())) == secret


def test_load_json_keyfile(tmp_path) -> None:
    secret = bytes(Keypair.from_seed(SEED))
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(secret)))

    assert bytes(load_keypair(str(path))) == secret


def test_mismatched_public_half_is_rejected() -> None:
    secret = SEED + bytes(32)
    with pytest.raises(ValueError):
        keypair_from_secret(secret)


@pytest.mark.parametrize("value", ["not a key", "abc", "00" * 40])
def test_invalid_keys_raise_config_error(value) -> None:
    with pytest.raises(ConfigError):
        load_keypair(value)

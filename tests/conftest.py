from __future__ import annotations

import asyncio
from typing import Any, Optional

import base58
import pytest
from solders.keypair import Keypair

from launchpad.core.pda import pubkey_bytes, pubkey_str
from launchpad.errors import BlockhashExpired, RpcError

BLOCKHASH = pubkey_str(bytes(range(32)))
LAST_VALID_BLOCK_HEIGHT = 1_000

MINT = "So11111111111111111111111111111111111111112"
TRADER = pubkey_str(bytes([7] * 32))
CREATOR = pubkey_str(bytes([9] * 32))


class FakeNetwork:
    """In-process stand-in for SolanaRpcClient."""

    def __init__(
        self,
        *,
        confirm_after_sends: Optional[int] = None,
        confirm_error: Any = None,
        preflight_error: Optional[Exception] = None,
        rebroadcast_error: Optional[Exception] = None,
        expire_after: Optional[float] = None,
        pool_data: Optional[bytes] = None,
        balances: Optional[dict] = None,
        token_balances: Optional[dict] = None,
    ):
        self.confirm_after_sends = confirm_after_sends
        self.confirm_error = confirm_error
        self.preflight_error = preflight_error
        self.rebroadcast_error = rebroadcast_error
        self.expire_after = expire_after
        self.pool_data = pool_data
        self.balances = balances or {}
        self.token_balances = token_balances or {}
        self.sends: list[tuple[float, bool, bytes]] = []
        self.account_requests: list[str] = []
        self.confirm_calls = 0
        self.closed = False

    async def get_latest_blockhash(self):
        return BLOCKHASH, LAST_VALID_BLOCK_HEIGHT

    async def send_raw_transaction(self, raw: bytes, skip_preflight: bool = False) -> str:
        self.sends.append((asyncio.get_running_loop().time(), skip_preflight, raw))
        if not skip_preflight and self.preflight_error is not None:
            raise self.preflight_error
        if skip_preflight and self.rebroadcast_error is not None:
            raise self.rebroadcast_error
        # first signature follows the 1-byte signature count
        return base58.b58encode(raw[1:65]).decode()

    async def confirm_transaction(self, signature, last_valid_block_height, commitment=None, poll_interval=0.5):
        self.confirm_calls += 1
        if self.expire_after is not None:
            await asyncio.sleep(self.expire_after)
            raise BlockhashExpired(signature, last_valid_block_height)
        if self.confirm_after_sends is None:
            await asyncio.Event().wait()
        while len(self.sends) < self.confirm_after_sends:
            await asyncio.sleep(0.005)
        return {"slot": 1, "confirmationStatus": "confirmed", "err": self.confirm_error}

    async def get_account_info(self, address: str):
        self.account_requests.append(address)
        return self.pool_data

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address, 0)

    async def get_token_account_balance(self, address: str) -> int:
        if address not in self.token_balances:
            raise RpcError("could not find account", -32602)
        return self.token_balances[address]

    async def close(self):
        self.closed = True

    def rebroadcast_times(self) -> list[float]:
        return [t for t, skip, _ in self.sends if skip]


def pool_account_data(creator: str = CREATOR) -> bytes:
    return bytes(32) + pubkey_bytes(creator) + bytes(40)


@pytest.fixture
def keypair() -> Keypair:
    return Keypair.from_seed(bytes([1] * 32))

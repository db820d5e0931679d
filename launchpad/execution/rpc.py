"""
Solana RPC client.

Wraps ``solana.rpc.async_api.AsyncClient`` with only the calls the
launchpad needs: blockhash, raw send, signature statuses with a
confirmation wait, account data and balances. Addresses and signatures
cross this boundary as base58 strings; node errors come out as RpcError.

Usage:
    async with SolanaRpcClient(config.rpc_url) as client:
        blockhash, last_valid = await client.get_latest_blockhash()
"""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.signature import Signature
from solders.transaction_status import TransactionConfirmationStatus

from ..core.pda import to_pubkey
from ..errors import BlockhashExpired, RpcError

logger = logging.getLogger(__name__)

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}

# TransactionConfirmationStatus is unhashable, so look names up with ==
_STATUS_NAMES = (
    (TransactionConfirmationStatus.Processed, "processed"),
    (TransactionConfirmationStatus.Confirmed, "confirmed"),
    (TransactionConfirmationStatus.Finalized, "finalized"),
)


def _status_name(level: Any) -> Optional[str]:
    return next((name for member, name in _STATUS_NAMES if member == level), None)

# Expected while a transaction is in flight or after it lands/expires
TRANSIENT_RPC_ERRORS = (RpcError, asyncio.TimeoutError)


def _rpc_error(error: Any) -> RpcError:
    """RpcError from an RPCException, a solders error message, or anything printable."""
    detail = error.args[0] if isinstance(error, RPCException) and error.args else error
    if isinstance(detail, dict):
        return RpcError(detail.get("message", "RPC error"), detail.get("code"), detail.get("data"))
    message = getattr(detail, "message", None) or str(detail)
    return RpcError(message, getattr(detail, "code", None), getattr(detail, "data", None))


def _value(resp: Any) -> Any:
    # solders returns the error message object in place of a failed response
    if not hasattr(resp, "value"):
        raise _rpc_error(resp)
    return resp.value


class SolanaRpcClient:
    """One AsyncClient per instance; every call maps node errors to RpcError."""

    def __init__(
        self,
        rpc_url: str = "https://api.mainnet-beta.solana.com",
        commitment: str = "confirmed",
        timeout: float = 15.0,
        client: Optional[AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.timeout = timeout
        self._client = client or AsyncClient(rpc_url, commitment=commitment, timeout=timeout)

    async def __aenter__(self) -> 'SolanaRpcClient':
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        await self._client.close()

    async def _request(self, call) -> Any:
        try:
            resp = await call
        except RPCException as e:
            raise _rpc_error(e) from e
        except SolanaRpcException as e:
            raise RpcError(getattr(e, "error_msg", None) or repr(e)) from e
        return _value(resp)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def get_latest_blockhash(self, commitment: Optional[str] = None) -> Tuple[str, int]:
        value = await self._request(self._client.get_latest_blockhash(commitment or self.commitment))
        return str(value.blockhash), value.last_valid_block_height

    async def get_block_height(self, commitment: Optional[str] = None) -> int:
        return await self._request(self._client.get_block_height(commitment or self.commitment))

    async def send_raw_transaction(self, raw: bytes, skip_preflight: bool = False) -> str:
        """Broadcast signed bytes. Node-side retries are disabled (max_retries=0)."""
        opts = TxOpts(
            skip_confirmation=True,
            skip_preflight=skip_preflight,
            preflight_commitment=self.commitment,
            max_retries=0,
        )
        signature = await self._request(self._client.send_raw_transaction(raw, opts=opts))
        return str(signature)

    async def get_signature_statuses(self, signatures: List[str]) -> List[Optional[dict]]:
        """Status dicts (``slot``, ``confirmationStatus``, ``err``) or None per signature."""
        statuses = await self._request(self._client.get_signature_statuses(
            [Signature.from_string(s) for s in signatures],
            search_transaction_history=False,
        ))
        return [
            None if status is None else {
                "slot": status.slot,
                "confirmationStatus": _status_name(status.confirmation_status),
                "err": status.err,
            }
            for status in statuses
        ]

    async def confirm_transaction(
        self,
        signature: str,
        last_valid_block_height: int,
        commitment: Optional[str] = None,
        poll_interval: float = 0.5,
    ) -> dict:
        """
        Poll until the signature reaches ``commitment``.

        A failed poll is logged and retried on the next interval.

        Returns:
            The signature status dict (``err`` is None on success)

        Raises:
            BlockhashExpired: block height passed last_valid_block_height first
        """
        target = _COMMITMENT_RANK[commitment or self.commitment]
        while True:
            try:
                status = (await self.get_signature_statuses([signature]))[0]
                if status is not None:
                    if status.get("err") is not None:
                        return status
                    level = status.get("confirmationStatus") or "processed"
                    if _COMMITMENT_RANK.get(level, 0) >= target:
                        return status
                elif await self.get_block_height() > last_valid_block_height:
                    raise BlockhashExpired(signature, last_valid_block_height)
            except TRANSIENT_RPC_ERRORS as e:
                logger.debug(f"Status poll for {signature} failed: {e}")
            await asyncio.sleep(poll_interval)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def get_account_info(self, address: str) -> Optional[bytes]:
        """Raw account data, or None if the account does not exist."""
        account = await self._request(self._client.get_account_info(
            to_pubkey(address), commitment=self.commitment, encoding="base64"
        ))
        if account is None:
            return None
        return bytes(account.data)

    async def get_balance(self, address: str) -> int:
        return await self._request(self._client.get_balance(to_pubkey(address), self.commitment))

    async def get_token_account_balance(self, address: str) -> int:
        """Raw token amount. RpcError if the account does not exist."""
        balance = await self._request(
            self._client.get_token_account_balance(to_pubkey(address), self.commitment)
        )
        return int(balance.amount)

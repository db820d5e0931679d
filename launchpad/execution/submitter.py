"""
Transaction Submission with Rebroadcast
=======================================

The network silently drops transactions, so one send is not enough:

1. Fetch blockhash, sign, send once WITH preflight (failure is fatal).
2. Concurrently:
   - wait for confirmation (bounded by ``confirmation_timeout``)
   - resend the same signed bytes every ``rebroadcast_interval`` seconds
     with preflight skipped, ignoring send errors
3. Whatever ends the wait cancels the rebroadcaster, and the
   rebroadcaster task is awaited before ``submit`` returns.

Usage:
    coordinator = SubmissionCoordinator(client, keypair, config)
    result = await coordinator.submit(instructions)
"""

import asyncio
import logging
import time
from typing import List

from solders.keypair import Keypair

from ..config import DEFAULT_CONFIG, LaunchpadConfig
from ..errors import (
    BlockhashExpired,
    ConfirmationTimeout,
    PreflightError,
    TransactionFailed,
)
from ..models import SubmissionAttempt, SubmissionResult
from .rpc import TRANSIENT_RPC_ERRORS
from .transaction import Instruction, build_transaction

logger = logging.getLogger(__name__)


class SubmissionCoordinator:
    """
    Signs, sends and rebroadcasts one transaction per ``submit`` call.

    Holds no per-call state, so concurrent submits are independent.
    """

    def __init__(self, client, keypair: Keypair, config: LaunchpadConfig = DEFAULT_CONFIG):
        self.client = client
        self.keypair = keypair
        self.config = config

    async def sign(self, instructions: List[Instruction]) -> SubmissionAttempt:
        blockhash, last_valid = await self.client.get_latest_blockhash()
        tx = build_transaction(instructions, self.keypair, blockhash)
        return SubmissionAttempt(
            signature=str(tx.signatures[0]),
            raw_transaction=bytes(tx),
            blockhash=blockhash,
            last_valid_block_height=last_valid,
        )

    async def submit(self, instructions: List[Instruction]) -> SubmissionResult:
        """
        Returns:
            SubmissionResult on confirmed success

        Raises:
            PreflightError: first send rejected
            TransactionFailed: confirmed with an execution error
            ConfirmationTimeout: no confirmation within confirmation_timeout
            BlockhashExpired: blockhash expired before confirmation
        """
        attempt = await self.sign(instructions)

        try:
            signature = await self.client.send_raw_transaction(attempt.raw_transaction, skip_preflight=False)
        except TRANSIENT_RPC_ERRORS as e:
            logger.error(f"Preflight send failed: {e}")
            raise PreflightError(e) from e
        if signature != attempt.signature:
            logger.warning(f"Node returned signature {signature}, expected {attempt.signature}")

        logger.info(f"Transaction sent: {attempt.signature}")
        rebroadcaster = asyncio.create_task(self._rebroadcast(attempt))
        try:
            status = await asyncio.wait_for(
                self.client.confirm_transaction(
                    attempt.signature,
                    attempt.last_valid_block_height,
                    self.config.commitment,
                    self.config.confirmation_poll_interval,
                ),
                timeout=self.config.confirmation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Confirmation timeout for {attempt.signature}")
            raise ConfirmationTimeout(attempt.signature, self.config.confirmation_timeout, attempt)
        except BlockhashExpired as e:
            logger.warning(f"Blockhash expired for {attempt.signature}")
            e.attempt = attempt
            raise
        finally:
            attempt.cancel()
            rebroadcaster.cancel()
            await asyncio.gather(rebroadcaster, return_exceptions=True)

        error = status.get("err") if status else None
        if error is not None:
            logger.error(f"Transaction {attempt.signature} failed: {error}")
            raise TransactionFailed(attempt.signature, error, attempt)

        latency_ms = (time.time() - attempt.started_at) * 1000
        logger.info(
            f"Transaction confirmed: {attempt.signature} "
            f"({latency_ms:.0f}ms, {attempt.rebroadcasts} rebroadcasts)"
        )
        return SubmissionResult(signature=attempt.signature, attempt=attempt, latency_ms=latency_ms)

    async def _rebroadcast(self, attempt: SubmissionAttempt):
        """Resend the signed bytes on a fixed interval until cancelled."""
        interval = self.config.rebroadcast_interval
        while not await attempt.wait_cancelled(interval):
            try:
                await self.client.send_raw_transaction(attempt.raw_transaction, skip_preflight=True)
            except TRANSIENT_RPC_ERRORS as e:
                logger.debug(f"Rebroadcast of {attempt.signature} failed: {e}")
            attempt.rebroadcasts += 1

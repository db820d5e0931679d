"""
Launchpad Direct Trading
========================

Buy/sell facade over the instruction builder and the submission
coordinator, plus wallet balance queries.

Usage:
    trader = TokenTrader(load_keypair(os.environ["PRIVATE_KEY"]), config)
    result = await trader.buy(mint, 0.1)        # 0.1 SOL
    result = await trader.sell(mint, 25_000)    # 25k tokens
    await trader.close()
"""

import logging

from solders.keypair import Keypair

from ..config import DEFAULT_CONFIG, LAMPORTS_PER_SOL, TOKEN_DECIMALS, LaunchpadConfig
from ..core.pda import derive_associated_token_account
from ..errors import RpcError
from ..models import SubmissionResult, TradeIntent, TradeSide
from .instruction_builder import TradeInstructionBuilder
from .rpc import SolanaRpcClient
from .submitter import SubmissionCoordinator

logger = logging.getLogger(__name__)


class TokenTrader:

    def __init__(self, keypair: Keypair, config: LaunchpadConfig = DEFAULT_CONFIG, client=None):
        self.keypair = keypair
        self.config = config
        self.client = client or SolanaRpcClient(config.rpc_url, config.commitment, config.request_timeout)
        self.builder = TradeInstructionBuilder(self.client, self.wallet, config)
        self.coordinator = SubmissionCoordinator(self.client, keypair, config)

    @property
    def wallet(self) -> str:
        return str(self.keypair.pubkey())

    async def submit(self, mint: str, side: TradeSide, amount: float) -> SubmissionResult:
        """Build, sign, send and confirm one trade."""
        intent = TradeIntent(mint=mint, side=side, amount=amount)
        instructions = await self.builder.build(intent)
        logger.info(f"{side.value} {amount} {'SOL' if side is TradeSide.BUY else 'tokens'} of {mint}")
        result = await self.coordinator.submit(instructions)
        logger.info(f"{side.value} successful: {result.signature}")
        return result

    async def buy(self, mint: str, sol_amount: float) -> SubmissionResult:
        return await self.submit(mint, TradeSide.BUY, sol_amount)

    async def sell(self, mint: str, token_amount: float) -> SubmissionResult:
        return await self.submit(mint, TradeSide.SELL, token_amount)

    async def get_sol_balance(self) -> float:
        lamports = await self.client.get_balance(self.wallet)
        return lamports / LAMPORTS_PER_SOL

    async def get_token_balance(self, mint: str) -> float:
        """Whole tokens held; 0 when the token account does not exist yet."""
        user_token = derive_associated_token_account(self.wallet, mint)
        try:
            raw = await self.client.get_token_account_balance(user_token)
        except RpcError as e:
            logger.debug(f"No token balance for {mint}: {e}")
            return 0.0
        return raw / TOKEN_DECIMALS

    async def close(self):
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()

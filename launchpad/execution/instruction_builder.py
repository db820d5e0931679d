"""
Launchpad trade instruction builder.

Account layout for BUY / SELL (9 accounts):
    0: user (signer, write)
    1: pool (write)
    2: mint (write)
    3: pool token account (write)
    4: user token account (write)
    5: creator (write)
    6: fee receiver (write)
    7: token program (read)
    8: system program (read)

Instruction data: discriminant(u8) + amount(u64) + min_out(u64)
"""

import logging
import math
import struct
from decimal import Decimal, InvalidOperation
from typing import List, Tuple

from ..config import (
    BUY_DISCRIMINANT,
    DEFAULT_CONFIG,
    LAMPORTS_PER_SOL,
    SELL_DISCRIMINANT,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_DECIMALS,
    U64_MAX,
    LaunchpadConfig,
)
from ..core.pda import (
    AddressLike,
    derive_associated_token_account,
    derive_pool_address,
    pubkey_str,
    to_pubkey,
)
from ..errors import InvalidTradeIntent, PoolNotFound
from ..models import TradeIntent, TradeSide
from .transaction import (
    AccountMeta,
    Instruction,
    create_associated_token_account_idempotent,
    set_compute_unit_limit,
    set_compute_unit_price,
)

logger = logging.getLogger(__name__)

# creator pubkey inside the pool account data
CREATOR_OFFSET = 32
CREATOR_LENGTH = 32


def to_raw_amount(amount: float, unit: int) -> int:
    """Whole units -> raw units, floored. Exact for decimal inputs like 0.29."""
    try:
        raw = math.floor(Decimal(str(amount)) * unit)
    except (InvalidOperation, ValueError, OverflowError) as e:
        raise InvalidTradeIntent(f"Invalid amount: {amount!r}") from e
    if raw <= 0:
        raise InvalidTradeIntent(f"Amount must be positive, got {amount!r}")
    if raw > U64_MAX:
        raise InvalidTradeIntent(f"Amount {amount!r} overflows u64")
    return raw


def _meta(address: AddressLike, is_signer: bool = False, is_writable: bool = False) -> AccountMeta:
    return AccountMeta(to_pubkey(address), is_signer=is_signer, is_writable=is_writable)


def encode_trade_data(discriminant: int, amount: int, min_out: int) -> bytes:
    return bytes([discriminant]) + struct.pack('<QQ', amount, min_out)


class TradeInstructionBuilder:
    """
    Build the ordered instruction list for one buy or sell.

    Example:
        builder = TradeInstructionBuilder(client, str(keypair.pubkey()), config)
        ixs = await builder.build(TradeIntent(mint, TradeSide.BUY, 0.1))
    """

    def __init__(self, client, owner: str, config: LaunchpadConfig = DEFAULT_CONFIG):
        self.client = client
        self.owner = owner
        self.config = config

    async def resolve_pool(self, mint: str) -> Tuple[str, str]:
        """
        Returns:
            (pool_address, creator)

        Raises:
            PoolNotFound: PDA not derivable, or account missing/too short
        """
        pool_address, found = derive_pool_address(mint, self.config.program_id)
        if not found:
            raise PoolNotFound(mint)
        data = await self.client.get_account_info(pool_address)
        if data is None or len(data) < CREATOR_OFFSET + CREATOR_LENGTH:
            raise PoolNotFound(mint, pool_address)
        creator = pubkey_str(data[CREATOR_OFFSET:CREATOR_OFFSET + CREATOR_LENGTH])
        return pool_address, creator

    def trade_accounts(
        self, pool: str, mint: str, pool_token: str, user_token: str, creator: str
    ) -> List[AccountMeta]:
        return [
            _meta(self.owner, is_signer=True, is_writable=True),
            _meta(pool, is_writable=True),
            _meta(mint, is_writable=True),
            _meta(pool_token, is_writable=True),
            _meta(user_token, is_writable=True),
            _meta(creator, is_writable=True),
            _meta(self.config.fee_receiver, is_writable=True),
            _meta(TOKEN_2022_PROGRAM_ID),
            _meta(SYSTEM_PROGRAM_ID),
        ]

    async def build(self, intent: TradeIntent) -> List[Instruction]:
        if intent.side is TradeSide.BUY:
            amount = to_raw_amount(intent.amount, LAMPORTS_PER_SOL)
            discriminant = BUY_DISCRIMINANT
        else:
            amount = to_raw_amount(intent.amount, TOKEN_DECIMALS)
            discriminant = SELL_DISCRIMINANT

        try:
            pool, creator = await self.resolve_pool(intent.mint)
            pool_token = derive_associated_token_account(pool, intent.mint)
            user_token = derive_associated_token_account(self.owner, intent.mint)
        except ValueError as e:
            raise PoolNotFound(intent.mint) from e

        instructions = [
            set_compute_unit_limit(self.config.compute_unit_limit),
            set_compute_unit_price(self.config.compute_unit_price),
        ]
        if intent.side is TradeSide.BUY:
            # Sell path assumes the caller already holds the account
            instructions.append(create_associated_token_account_idempotent(
                self.owner, self.owner, intent.mint
            ))
        instructions.append(Instruction(
            program_id=to_pubkey(self.config.program_id),
            data=encode_trade_data(discriminant, amount, self.config.min_out),
            accounts=self.trade_accounts(pool, intent.mint, pool_token, user_token, creator),
        ))

        logger.debug(
            f"Built {intent.side.value} for {intent.mint[:8]}...: amount={amount} pool={pool}"
        )
        return instructions

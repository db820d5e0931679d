"""
LAUNCHPAD EXECUTION MODULE
==========================

Write path: build, sign and reliably submit buy/sell transactions.

Components:
- TradeInstructionBuilder: compute budget + ATA + domain instruction
- SubmissionCoordinator: send, rebroadcast every 2s, confirm
- TokenTrader: buy/sell/balance facade
- SolanaRpcClient: RPC collaborator over solana-py's AsyncClient
- load_keypair: the single signing key, as a solders Keypair

Usage:
    from launchpad.execution import TokenTrader, load_keypair

    trader = TokenTrader(load_keypair(private_key))
    result = await trader.buy(mint, 0.1)
"""

from .instruction_builder import TradeInstructionBuilder, encode_trade_data, to_raw_amount
from .rpc import SolanaRpcClient
from .submitter import SubmissionCoordinator
from .trader import TokenTrader
from .transaction import (
    AccountMeta,
    Instruction,
    Transaction,
    build_transaction,
    create_associated_token_account_idempotent,
    set_compute_unit_limit,
    set_compute_unit_price,
)
from .wallet import Keypair, keypair_from_secret, load_keypair


__all__ = [
    # Trading
    'TokenTrader',
    'TradeInstructionBuilder',
    'SubmissionCoordinator',
    'encode_trade_data',
    'to_raw_amount',

    # Transport
    'SolanaRpcClient',

    # Transaction building
    'AccountMeta',
    'Instruction',
    'Transaction',
    'build_transaction',
    'create_associated_token_account_idempotent',
    'set_compute_unit_limit',
    'set_compute_unit_price',

    # Keys
    'Keypair',
    'keypair_from_secret',
    'load_keypair',
]

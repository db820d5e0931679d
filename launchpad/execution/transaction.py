"""
Solana Transaction Building
===========================

Compute-budget and associated-token-account helper instructions, and a
single-signer legacy transaction built with ``solders``.
"""

from typing import List, Union

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction
from spl.token.instructions import create_idempotent_associated_token_account

from ..config import TOKEN_2022_PROGRAM_ID
from ..core.pda import AddressLike, to_pubkey

PACKET_DATA_SIZE = 1232

__all__ = [
    'AccountMeta',
    'Instruction',
    'Transaction',
    'PACKET_DATA_SIZE',
    'build_transaction',
    'create_associated_token_account_idempotent',
    'set_compute_unit_limit',
    'set_compute_unit_price',
]


def create_associated_token_account_idempotent(
    payer: AddressLike,
    owner: AddressLike,
    mint: AddressLike,
    token_program_id: AddressLike = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """No-op on chain when the account already exists."""
    return create_idempotent_associated_token_account(
        to_pubkey(payer), to_pubkey(owner), to_pubkey(mint), token_program_id=to_pubkey(token_program_id)
    )


def build_transaction(
    instructions: List[Instruction],
    payer: Keypair,
    recent_blockhash: Union[str, Hash],
) -> Transaction:
    """
    Compile and sign a legacy transaction paid and signed by ``payer`` alone.

    Raises:
        ValueError: another account must sign, or the packet is too large
    """
    if isinstance(recent_blockhash, str):
        recent_blockhash = Hash.from_string(recent_blockhash)
    message = Message.new_with_blockhash(instructions, payer.pubkey(), recent_blockhash)
    if message.header.num_required_signatures != 1:
        raise ValueError("Only the fee payer may sign this transaction")

    tx = Transaction.new_signed_with_payer(
        instructions,
        payer=payer.pubkey(),
        signing_keypairs=[payer],
        recent_blockhash=recent_blockhash,
    )
    if len(bytes(tx)) > PACKET_DATA_SIZE:
        raise ValueError("Transaction exceeds packet size")
    return tx

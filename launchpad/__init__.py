"""
Launchpad Module - Event Decoding and Trade Execution
=====================================================

Read path:  program logs -> EventDecoder -> typed events -> callbacks
Write path: TradeIntent -> TradeInstructionBuilder -> signed tx
            -> SubmissionCoordinator (send + rebroadcast + confirm)

Usage:
    from launchpad import EventStream, EventKind, LogSubscription, LaunchpadConfig

    config = LaunchpadConfig.from_env()
    stream = EventStream(config)
    stream.on(EventKind.TRADE, print)
    await stream.run(LogSubscription(config))
"""

# Configuration
from .config import LaunchpadConfig, DEFAULT_CONFIG, PROGRAM_ID

# Data models
from .models import (
    EventKind,
    Phase,
    TradeSide,
    PricingResult,
    PoolCreatedPayload,
    TradePayload,
    PhaseChangePayload,
    UnrecognizedPayload,
    EventEnvelope,
    TradeIntent,
    SubmissionAttempt,
    SubmissionResult,
)

# Errors
from .errors import (
    LaunchpadError,
    ConfigError,
    DecodeError,
    OutOfBounds,
    RpcError,
    InvalidTradeIntent,
    PoolNotFound,
    SubmissionError,
    PreflightError,
    TransactionFailed,
    ConfirmationTimeout,
    BlockhashExpired,
)

# Read path
from .events import EventDecoder, EventStream, LogBatch, LogSubscription

# Write path
from .execution import TokenTrader, SubmissionCoordinator, TradeInstructionBuilder, load_keypair


__all__ = [
    # Config
    'LaunchpadConfig',
    'DEFAULT_CONFIG',
    'PROGRAM_ID',

    # Models
    'EventKind',
    'Phase',
    'TradeSide',
    'PricingResult',
    'PoolCreatedPayload',
    'TradePayload',
    'PhaseChangePayload',
    'UnrecognizedPayload',
    'EventEnvelope',
    'TradeIntent',
    'SubmissionAttempt',
    'SubmissionResult',

    # Errors
    'LaunchpadError',
    'ConfigError',
    'DecodeError',
    'OutOfBounds',
    'RpcError',
    'InvalidTradeIntent',
    'PoolNotFound',
    'SubmissionError',
    'PreflightError',
    'TransactionFailed',
    'ConfirmationTimeout',
    'BlockhashExpired',

    # Read path
    'EventDecoder',
    'EventStream',
    'LogBatch',
    'LogSubscription',

    # Write path
    'TokenTrader',
    'SubmissionCoordinator',
    'TradeInstructionBuilder',
    'load_keypair',
]

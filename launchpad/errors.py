"""Exceptions raised across the launchpad package."""

from typing import Any, Optional


class LaunchpadError(Exception):
    """Base exception for all package errors."""


class ConfigError(LaunchpadError):
    """Raised when environment configuration is invalid or missing."""


class DecodeError(LaunchpadError):
    """Raised when an event buffer cannot be parsed."""


class OutOfBounds(DecodeError):
    """Raised when a read would run past the end of the buffer."""

    def __init__(self, offset: int, requested: int, length: int):
        self.offset = offset
        self.requested = requested
        self.length = length
        super().__init__(
            f"read of {requested} bytes at offset {offset} exceeds buffer of {length} bytes"
        )


class RpcError(LaunchpadError):
    """JSON-RPC error object returned by the node."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        self.code = code
        self.data = data
        super().__init__(message if code is None else f"[{code}] {message}")


class InvalidTradeIntent(LaunchpadError):
    """Raised when a buy/sell amount cannot be converted to raw units."""


class PoolNotFound(LaunchpadError):
    """Raised when the pool account for a mint does not exist."""

    def __init__(self, mint: str, pool_address: Optional[str] = None):
        self.mint = mint
        self.pool_address = pool_address
        super().__init__(f"Pool not found for mint {mint}")


class SubmissionError(LaunchpadError):
    """Base for terminal transaction submission outcomes."""

    def __init__(self, message: str, signature: Optional[str] = None, attempt=None):
        self.signature = signature
        self.attempt = attempt
        super().__init__(message)


class PreflightError(SubmissionError):
    """First send was rejected; never retried."""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Preflight send failed: {cause}")


class TransactionFailed(SubmissionError):
    """Transaction confirmed but the ledger reported an execution error."""

    def __init__(self, signature: str, error: Any, attempt=None):
        self.error = error
        super().__init__(f"Transaction failed: {error!r}", signature, attempt)


class ConfirmationTimeout(SubmissionError):
    """No confirmation arrived before the configured timeout."""

    def __init__(self, signature: str, timeout: float, attempt=None):
        self.timeout = timeout
        super().__init__(
            f"Transaction {signature} not confirmed within {timeout:.1f}s", signature, attempt
        )


class BlockhashExpired(SubmissionError):
    """Block height passed the attempt's last valid block height."""

    def __init__(self, signature: str, last_valid_block_height: int, attempt=None):
        self.last_valid_block_height = last_valid_block_height
        super().__init__(
            f"Transaction {signature} expired at block height {last_valid_block_height}",
            signature,
            attempt,
        )

"""Typed exception hierarchy for gavel.

Every error carries the process exit code the CLI reports for it, so command
wrappers can map any failure to a status with a single ``except GavelError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gavel.core.blocks import BlockReference


# Process exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CONNECTION = 3
EXIT_REQUEST = 4
EXIT_TIMEOUT = 5
EXIT_REMOTE = 6
EXIT_NOT_FOUND = 7
EXIT_PARTIAL_BATCH = 8
EXIT_INTERRUPTED = 130


class GavelError(Exception):
    """Base class for all gavel errors."""

    exit_code: int = EXIT_FAILURE

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(GavelError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""

    exit_code = EXIT_USAGE


class InvalidEndpointError(GavelError):
    """Raised when the endpoint URL is not a usable ws:// or wss:// URL."""

    exit_code = EXIT_USAGE

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid endpoint '{url}': {reason}")


class InvalidAddressError(GavelError):
    """Raised when the --resolve override is not an IPv4 dotted quad."""

    exit_code = EXIT_USAGE

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Invalid IPv4 address '{address}'")


class InvalidBlockNumberError(GavelError):
    """Raised when a block number is neither decimal nor 0x-prefixed hex."""

    exit_code = EXIT_USAGE

    def __init__(self, value: str, reason: str = "expected decimal or 0x-prefixed hex") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid block number '{value}': {reason}")


class ConnectionFailedError(GavelError):
    """Raised when the TCP/TLS connection or WebSocket handshake fails."""

    exit_code = EXIT_CONNECTION


class RequestFailedError(GavelError):
    """Raised when the socket closes or a bad frame arrives before the response."""

    exit_code = EXIT_REQUEST


class RequestTimeoutError(GavelError):
    """Raised when no matching response arrives within the request timeout."""

    exit_code = EXIT_TIMEOUT


class RemoteError(GavelError):
    """Raised when the node answers with a JSON-RPC error object."""

    exit_code = EXIT_REMOTE

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


class BlockNotFoundError(GavelError):
    """Raised when the node has no block for the requested reference."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, reference: BlockReference | str) -> None:
        self.reference = reference
        super().__init__(f"No such block: {reference}")


class PartialBatchFailureError(GavelError):
    """Raised when one element of an MMR batch fails; earlier results are discarded."""

    exit_code = EXIT_PARTIAL_BATCH

    def __init__(self, reference: BlockReference, cause: GavelError) -> None:
        self.reference = reference
        self.cause = cause
        super().__init__(f"MMR proof for block {reference} failed: {cause.message}")

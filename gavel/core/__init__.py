"""Core types: errors, endpoints and block references."""

from gavel.core.blocks import (
    BlockKind,
    BlockReference,
    parse_block_reference,
    parse_block_references,
)
from gavel.core.endpoint import Endpoint, resolve_endpoint
from gavel.core.errors import (
    BlockNotFoundError,
    ConfigError,
    ConnectionFailedError,
    GavelError,
    InvalidAddressError,
    InvalidBlockNumberError,
    InvalidEndpointError,
    PartialBatchFailureError,
    RemoteError,
    RequestFailedError,
    RequestTimeoutError,
)

__all__ = [
    "BlockKind",
    "BlockReference",
    "parse_block_reference",
    "parse_block_references",
    "Endpoint",
    "resolve_endpoint",
    "GavelError",
    "ConfigError",
    "InvalidEndpointError",
    "InvalidAddressError",
    "InvalidBlockNumberError",
    "ConnectionFailedError",
    "RequestFailedError",
    "RequestTimeoutError",
    "RemoteError",
    "BlockNotFoundError",
    "PartialBatchFailureError",
]

"""JSON-RPC 2.0 types for talking to blockchain nodes."""

from dataclasses import dataclass
from typing import Any


@dataclass
class Request:
    """JSON-RPC 2.0 request.

    Attributes:
        jsonrpc: Protocol version, must be "2.0".
        method: Name of the node method to invoke.
        params: Positional parameters, in the order the node expects them.
        id: Correlation identifier echoed back by the node.
    """

    jsonrpc: str
    method: str
    params: list[Any]
    id: str


@dataclass
class Response:
    """JSON-RPC 2.0 response.

    Attributes:
        jsonrpc: Protocol version, always "2.0".
        id: Request identifier from the original request (None for
            protocol-level errors the server could not attribute).
        result: Result of the method call (mutually exclusive with error).
        error: Error object if the call failed (mutually exclusive with result).
    """

    jsonrpc: str
    id: str | int | None
    result: Any | None = None
    error: dict[str, Any] | None = None

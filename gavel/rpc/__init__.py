"""JSON-RPC 2.0 client-side protocol support."""

from gavel.rpc.protocol import (
    ParseError,
    decode_frame,
    is_notification,
    make_request,
    new_request_id,
    parse_response,
    serialize_request,
)
from gavel.rpc.types import Request, Response

__all__ = [
    "ParseError",
    "Request",
    "Response",
    "decode_frame",
    "is_notification",
    "make_request",
    "new_request_id",
    "parse_response",
    "serialize_request",
]

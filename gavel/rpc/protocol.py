"""JSON-RPC 2.0 serialization and response parsing."""

import json
import secrets
import string
from typing import Any

from gavel.core.errors import GavelError
from gavel.rpc.types import Request, Response


class ParseError(GavelError):
    """Raised when a frame is not a valid JSON-RPC 2.0 response."""


REQUEST_ID_LENGTH = 10
_ID_ALPHABET = string.ascii_letters + string.digits


def new_request_id() -> str:
    """Generate a random alphanumeric correlation id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(REQUEST_ID_LENGTH))


def make_request(method: str, params: list[Any] | None = None) -> Request:
    """Build a request with a fresh correlation id."""
    return Request(
        jsonrpc="2.0",
        method=method,
        params=list(params) if params is not None else [],
        id=new_request_id(),
    )


def serialize_request(request: Request) -> str:
    """Serialize a Request to a single JSON text frame.

    Args:
        request: The Request object to serialize.

    Returns:
        Compact JSON text.
    """
    data: dict[str, Any] = {
        "jsonrpc": request.jsonrpc,
        "id": request.id,
        "method": request.method,
        "params": request.params,
    }
    return json.dumps(data, separators=(",", ":"))


def is_notification(data: dict[str, Any]) -> bool:
    """Check whether a decoded frame is a server notification (no id)."""
    return "id" not in data and "method" in data


def decode_frame(text: str) -> dict[str, Any]:
    """Decode a text frame into a JSON object.

    Raises:
        ParseError: If the text is not JSON or not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Response must be a JSON object")
    return data


def parse_response(data: str | dict[str, Any]) -> Response:
    """Parse a frame into a JSON-RPC 2.0 Response.

    Args:
        data: Raw frame text, or an already decoded JSON object.

    Returns:
        A parsed Response object.

    Raises:
        ParseError: If the JSON is invalid or required fields are missing.
    """
    if isinstance(data, str):
        data = decode_frame(data)

    jsonrpc = data.get("jsonrpc")
    if jsonrpc != "2.0":
        raise ParseError(f"jsonrpc must be '2.0', got: {jsonrpc!r}")

    # id is required in responses but may be null
    if "id" not in data:
        raise ParseError("Response must have 'id' field")
    response_id = data.get("id")
    if response_id is not None and (
        isinstance(response_id, bool) or not isinstance(response_id, (str, int))
    ):
        raise ParseError(f"id must be string, number, or null, got: {type(response_id).__name__}")

    has_result = "result" in data
    has_error = "error" in data

    if has_result and has_error:
        raise ParseError("Response cannot have both 'result' and 'error'")
    if not has_result and not has_error:
        raise ParseError("Response must have either 'result' or 'error'")

    error = data.get("error")
    if has_error:
        if not isinstance(error, dict):
            raise ParseError(f"error must be an object, got: {type(error).__name__}")
        if "code" not in error or "message" not in error:
            raise ParseError("error must have 'code' and 'message' fields")

    return Response(
        jsonrpc=jsonrpc,
        id=response_id,
        result=data.get("result"),
        error=error,
    )

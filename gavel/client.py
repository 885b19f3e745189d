"""Async WebSocket JSON-RPC client for blockchain nodes."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

from gavel.config.schema import Config, RpcMethodsConfig
from gavel.core.endpoint import Endpoint
from gavel.core.errors import GavelError, RemoteError, RequestFailedError, RequestTimeoutError
from gavel.rpc.protocol import (
    ParseError,
    decode_frame,
    is_notification,
    make_request,
    parse_response,
    serialize_request,
)
from gavel.rpc.types import Response
from gavel.transport import WebSocketTransport

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    REQUEST_IN_FLIGHT = "request_in_flight"
    CLOSED = "closed"


class GavelClient:
    """Async client for one node connection with one request in flight.

    Usage:
        endpoint = resolve_endpoint("wss://rpc.example.org", resolve="10.0.0.5")
        async with GavelClient(endpoint) as client:
            head = await client.get_head()
            block = await client.get_block(head)

    The connection is closed on every exit path of the ``async with`` block,
    including errors and cancellation.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        config: Config | None = None,
        transport: WebSocketTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Resolved node endpoint.
            config: Timeouts, TLS and method names. Defaults to Config().
            transport: Pre-built transport (tests inject fakes here).
        """
        self._config = config or Config()
        self._endpoint = endpoint
        if transport is None:
            transport = WebSocketTransport(
                endpoint,
                connect_timeout=self._config.connect_timeout,
                verify_tls=self._config.verify_tls,
                max_message_size=self._config.max_message_size,
            )
        self._transport = transport
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def methods(self) -> RpcMethodsConfig:
        return self._config.methods

    async def __aenter__(self) -> GavelClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the connection.

        Raises:
            ConnectionFailedError: If the connection or handshake fails.
        """
        if self._state is not ConnectionState.DISCONNECTED:
            raise GavelError(f"Cannot connect from state {self._state.value}")
        self._state = ConnectionState.CONNECTING
        try:
            await self._transport.connect()
        except BaseException:
            self._state = ConnectionState.CLOSED
            raise
        self._state = ConnectionState.CONNECTED

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        self._state = ConnectionState.CLOSED
        await self._transport.close()

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """Send one request and wait for its response.

        Args:
            method: Node RPC method name.
            params: Positional parameters.

        Returns:
            The ``result`` field of the matching response.

        Raises:
            RemoteError: If the node answered with an error object.
            RequestFailedError: If the connection closed or a bad frame arrived.
            RequestTimeoutError: If no matching response arrived in time.
        """
        if self._state is ConnectionState.REQUEST_IN_FLIGHT:
            raise RequestFailedError("Another request is already in flight")
        if self._state is not ConnectionState.CONNECTED:
            raise RequestFailedError(f"Client not connected (state: {self._state.value})")

        request = make_request(method, params)
        logger.debug("RPC call: method=%s, id=%s", method, request.id)

        self._state = ConnectionState.REQUEST_IN_FLIGHT
        try:
            await self._transport.send(serialize_request(request))
            response = await asyncio.wait_for(
                self._await_response(request.id),
                timeout=self._config.request_timeout,
            )
        except TimeoutError as e:
            logger.warning(
                "Request timed out: method=%s, timeout=%s", method, self._config.request_timeout
            )
            await self.close()
            raise RequestTimeoutError(
                f"No response to {method} within {self._config.request_timeout}s"
            ) from e
        except RequestFailedError as e:
            logger.warning("Request failed: method=%s: %s", method, e)
            await self.close()
            raise
        except BaseException:
            await self.close()
            raise

        self._state = ConnectionState.CONNECTED
        return self._check(response)

    async def _await_response(self, request_id: str) -> Response:
        """Read frames until the response for request_id arrives."""
        while True:
            frame = await self._transport.receive()
            if isinstance(frame, bytes):
                logger.debug("Discarded binary frame (%d bytes)", len(frame))
                continue

            try:
                data = decode_frame(frame)
                if is_notification(data):
                    logger.debug("Discarded notification: %s", data.get("method"))
                    continue
                response = parse_response(data)
            except ParseError as e:
                raise RequestFailedError(f"Invalid response frame: {e.message}") from e

            if response.id is None and response.error is not None:
                raise RequestFailedError(
                    f"Protocol error from node: {response.error.get('message', 'unknown')}"
                )

            if response.id != request_id:
                logger.debug(
                    "Discarded response with mismatched id: expected %s, got %s",
                    request_id,
                    response.id,
                )
                continue

            return response

    def _check(self, response: Response) -> Any:
        """Extract result from response or raise RemoteError."""
        if response.error:
            code = response.error.get("code", -1)
            message = response.error.get("message", "Unknown error")
            logger.warning("RPC error %s: %s", code, message)
            raise RemoteError(code, message, response.error.get("data"))
        return response.result

    # Node calls

    async def get_head(self) -> Any:
        """Get the hash of the current head block."""
        return await self.request(self.methods.get_head, [])

    async def get_block_hash(self, height: int) -> Any:
        """Get the hash of the block at a height (None if unknown)."""
        return await self.request(self.methods.get_block_hash, [height])

    async def get_block(self, block_hash: str) -> Any:
        """Get a block (header and body) by hash (None if unknown)."""
        return await self.request(self.methods.get_block, [block_hash])

    async def generate_mmr_proof(self, heights: list[int]) -> Any:
        """Ask the node to generate an MMR proof for the given heights."""
        return await self.request(self.methods.generate_mmr_proof, [list(heights)])

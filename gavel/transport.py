"""WebSocket transport to a blockchain node.

Connects with the websockets asyncio client. When the endpoint carries an
IPv4 override, the socket is opened to that address while the URL host is
still used for TLS server name checks and the handshake Host header.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any

import websockets
from websockets.asyncio.client import ClientConnection

from gavel.core.endpoint import Endpoint
from gavel.core.errors import ConnectionFailedError, RequestFailedError

logger = logging.getLogger(__name__)


def _insecure_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class WebSocketTransport:
    """A single WebSocket connection carrying JSON-RPC text frames."""

    def __init__(
        self,
        endpoint: Endpoint,
        connect_timeout: float = 10.0,
        verify_tls: bool = True,
        max_message_size: int | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._connect_timeout = connect_timeout
        self._verify_tls = verify_tls
        self._max_message_size = max_message_size
        self._ws: ClientConnection | None = None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    def _connect_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "open_timeout": self._connect_timeout,
            "max_size": self._max_message_size,
            # One short exchange per connection, no keepalive
            "ping_interval": None,
        }
        if self._endpoint.override is not None:
            # host/port only redirect the TCP connection; websockets keeps
            # using the URL host for SNI and the Host header
            kwargs["host"] = str(self._endpoint.override)
            kwargs["port"] = self._endpoint.port
            # Connect straight to the override even when a proxy is configured
            kwargs["proxy"] = None
        if self._endpoint.is_secure and not self._verify_tls:
            kwargs["ssl"] = _insecure_ssl_context()
        return kwargs

    async def connect(self) -> None:
        """Open the connection and complete the WebSocket handshake.

        Raises:
            ConnectionFailedError: On DNS, socket, TLS, handshake or timeout failure.
        """
        logger.debug(
            "Connecting to %s (tcp %s:%d, path %s)",
            self._endpoint.host,
            self._endpoint.connect_host,
            self._endpoint.port,
            self._endpoint.path,
        )
        try:
            # Use await directly (NOT async with) since lifecycle is managed by connect/close
            self._ws = await websockets.connect(self._endpoint.url, **self._connect_kwargs())
        except TimeoutError as e:
            logger.warning("Connection to %s timed out", self._endpoint)
            raise ConnectionFailedError(
                f"Connection to {self._endpoint} timed out after {self._connect_timeout}s"
            ) from e
        except (OSError, websockets.exceptions.WebSocketException) as e:
            logger.warning("Connection to %s failed: %s", self._endpoint, e)
            raise ConnectionFailedError(f"Connection to {self._endpoint} failed: {e}") from e
        logger.debug("Connected to %s", self._endpoint)

    async def send(self, text: str) -> None:
        """Send one text frame.

        Raises:
            RequestFailedError: If the connection is not open or closes while sending.
        """
        if self._ws is None:
            raise RequestFailedError("Not connected")
        try:
            await self._ws.send(text)
        except websockets.exceptions.ConnectionClosed as e:
            raise RequestFailedError(f"Connection closed while sending: {e}") from e

    async def receive(self) -> str | bytes:
        """Wait for the next frame (str for text frames, bytes for binary).

        Raises:
            RequestFailedError: If the connection closes before a frame arrives.
        """
        if self._ws is None:
            raise RequestFailedError("Not connected")
        try:
            return await self._ws.recv()
        except websockets.exceptions.ConnectionClosed as e:
            raise RequestFailedError(
                f"Connection closed before receiving response: {e}"
            ) from e

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()
            logger.debug("Closed connection to %s", self._endpoint)

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

"""WebSocket endpoint resolution with optional manual IPv4 override.

An override replaces DNS only: the TCP connection goes to the given address,
while TLS server name checks and the handshake Host header keep using the
hostname from the URL.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from urllib.parse import urlparse

from gavel.core.errors import InvalidAddressError, InvalidEndpointError

DEFAULT_PORTS = {"ws": 80, "wss": 443}


@dataclass(frozen=True)
class Endpoint:
    """A resolved connection target.

    Attributes:
        url: The original URL, used for the WebSocket handshake.
        scheme: "ws" or "wss".
        host: Hostname from the URL (TLS identity and Host header).
        port: Explicit URL port, or the scheme default.
        path: Request path including any query string.
        override: IPv4 address to connect to instead of resolving host.
    """

    url: str
    scheme: str
    host: str
    port: int
    path: str
    override: ipaddress.IPv4Address | None = None

    @property
    def is_secure(self) -> bool:
        return self.scheme == "wss"

    @property
    def connect_host(self) -> str:
        """Address the TCP connection is opened to."""
        if self.override is not None:
            return str(self.override)
        return self.host

    def __str__(self) -> str:
        if self.override is not None:
            return f"{self.url} (via {self.override})"
        return self.url


def parse_ipv4(address: str) -> ipaddress.IPv4Address:
    """Parse a dotted-quad IPv4 address.

    Raises:
        InvalidAddressError: If the string is not a valid IPv4 address.
    """
    try:
        return ipaddress.IPv4Address(address.strip())
    except ipaddress.AddressValueError as e:
        raise InvalidAddressError(address) from e


def resolve_endpoint(url: str, resolve: str | None = None) -> Endpoint:
    """Turn a WebSocket URL and optional IPv4 override into an Endpoint.

    No network I/O happens here; the override is validated syntactically.

    Args:
        url: ws:// or wss:// URL of the node.
        resolve: Optional IPv4 address to connect to instead of resolving
            the URL host through DNS.

    Returns:
        An immutable Endpoint.

    Raises:
        InvalidEndpointError: If the URL is malformed.
        InvalidAddressError: If the override is not a valid IPv4 address.
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        raise InvalidEndpointError(url, str(e)) from e

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InvalidEndpointError(url, "scheme must be ws or wss")

    host = parsed.hostname
    if not host:
        raise InvalidEndpointError(url, "missing host")

    try:
        port = parsed.port
    except ValueError as e:
        raise InvalidEndpointError(url, "invalid port") from e
    if port is None:
        port = DEFAULT_PORTS[scheme]

    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"

    override = parse_ipv4(resolve) if resolve is not None else None

    return Endpoint(
        url=url.strip(),
        scheme=scheme,
        host=host,
        port=port,
        path=path,
        override=override,
    )

"""Shared pytest fixtures: an in-memory transport and a scripted node."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import pytest

from gavel.core.errors import ConnectionFailedError, RequestFailedError

HEAD_NUMBER = 100
HEAD_HASH = "0x" + "ab" * 32


def block_hash_for(height: int) -> str:
    return f"0x{height:064x}"


def reply(request: dict[str, Any], result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request["id"], "result": result}


def error_reply(request: dict[str, Any], code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request["id"], "error": {"code": code, "message": message}}


class FakeTransport:
    """In-memory stand-in for WebSocketTransport.

    ``handler`` receives each decoded request and returns the frames the
    "node" sends back: dicts are JSON-encoded, str/bytes are sent as-is and
    exception instances are raised from receive().
    """

    def __init__(self, handler: Callable[[dict[str, Any]], list[Any]] | None = None) -> None:
        self.handler = handler or (lambda request: [reply(request, None)])
        self.sent: list[dict[str, Any]] = []
        self.connect_error: Exception | None = None
        self.connected = False
        self.closed = False
        self._frames: asyncio.Queue[Any] = asyncio.Queue()

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def send(self, text: str) -> None:
        if self.closed:
            raise RequestFailedError("Not connected")
        request = json.loads(text)
        self.sent.append(request)
        for frame in self.handler(request):
            if isinstance(frame, dict):
                frame = json.dumps(frame)
            self._frames.put_nowait(frame)

    async def receive(self) -> str | bytes:
        frame = await self._frames.get()
        if isinstance(frame, BaseException):
            raise frame
        return frame

    async def close(self) -> None:
        self.closed = True

    @property
    def is_connected(self) -> bool:
        return self.connected and not self.closed

    @property
    def methods(self) -> list[str]:
        return [request["method"] for request in self.sent]


class FakeNode:
    """A small Substrate-like chain answering the default method names.

    Blocks 0..HEAD_NUMBER exist; ``fail_proof_for`` makes proof generation
    fail with an RPC error for the given heights.
    """

    def __init__(self) -> None:
        self.fail_proof_for: set[int] = set()
        self.transport = FakeTransport(self.handle)

    def block(self, height: int) -> dict[str, Any]:
        return {
            "block": {
                "header": {
                    "parentHash": block_hash_for(max(height - 1, 0)),
                    "number": hex(height),
                    "stateRoot": "0x" + "11" * 32,
                    "extrinsicsRoot": "0x" + "22" * 32,
                    "digest": {"logs": []},
                },
                "extrinsics": [],
            },
            "justifications": None,
        }

    def _height_of(self, block_hash: str) -> int | None:
        if block_hash == HEAD_HASH:
            return HEAD_NUMBER
        for height in range(HEAD_NUMBER + 1):
            if block_hash_for(height) == block_hash:
                return height
        return None

    def handle(self, request: dict[str, Any]) -> list[Any]:
        method = request["method"]
        params = request["params"]
        if method == "chain_getHead":
            return [reply(request, HEAD_HASH)]
        if method == "chain_getBlockHash":
            height = params[0]
            if height == HEAD_NUMBER:
                return [reply(request, HEAD_HASH)]
            return [reply(request, block_hash_for(height) if height <= HEAD_NUMBER else None)]
        if method == "chain_getBlock":
            height = self._height_of(params[0])
            return [reply(request, self.block(height) if height is not None else None)]
        if method == "mmr_generateProof":
            heights = params[0]
            if any(h in self.fail_proof_for for h in heights):
                return [error_reply(request, 8010, "Error generating proof: InvalidLeafIndex")]
            return [reply(request, {
                "blockHash": HEAD_HASH,
                "leaves": "0x" + "".join(f"{h:04x}" for h in heights),
                "proof": "0xfeed",
            })]
        return [error_reply(request, -32601, "Method not found")]


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def unreachable_transport() -> FakeTransport:
    transport = FakeTransport()
    transport.connect_error = ConnectionFailedError("Connection to ws://node failed: refused")
    return transport


@pytest.fixture
def make_transport() -> Callable[[Callable[[dict[str, Any]], list[Any]]], FakeTransport]:
    """Build a FakeTransport from a request -> frames handler."""
    return FakeTransport

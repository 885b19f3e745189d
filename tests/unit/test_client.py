"""Unit tests for GavelClient."""

import asyncio

import pytest

from gavel.client import ConnectionState, GavelClient
from gavel.config.schema import Config, RpcMethodsConfig
from gavel.core.endpoint import resolve_endpoint
from gavel.core.errors import (
    ConnectionFailedError,
    GavelError,
    RemoteError,
    RequestFailedError,
    RequestTimeoutError,
)

ENDPOINT = resolve_endpoint("ws://127.0.0.1:9944")


def _client(transport, **config_kwargs):
    return GavelClient(ENDPOINT, Config(**config_kwargs), transport=transport)


def _reply(request, result):
    return {"jsonrpc": "2.0", "id": request["id"], "result": result}


class TestLifecycle:
    """Connection state transitions."""

    @pytest.mark.asyncio
    async def test_context_manager_connects_and_closes(self, fake_node):
        """async with opens the transport and always closes it."""
        client = GavelClient(ENDPOINT, transport=fake_node.transport)
        assert client.state is ConnectionState.DISCONNECTED

        async with client:
            assert client.state is ConnectionState.CONNECTED
            assert fake_node.transport.connected

        assert client.state is ConnectionState.CLOSED
        assert fake_node.transport.closed

    @pytest.mark.asyncio
    async def test_closes_on_error(self, fake_node):
        """The transport is closed when the body raises."""
        with pytest.raises(ValueError):
            async with GavelClient(ENDPOINT, transport=fake_node.transport):
                raise ValueError("boom")
        assert fake_node.transport.closed

    @pytest.mark.asyncio
    async def test_connect_failure(self, unreachable_transport):
        """A failed connect surfaces ConnectionFailedError and ends CLOSED."""
        client = GavelClient(ENDPOINT, transport=unreachable_transport)
        with pytest.raises(ConnectionFailedError):
            async with client:
                pytest.fail("body must not run")
        assert client.state is ConnectionState.CLOSED
        assert unreachable_transport.sent == []

    @pytest.mark.asyncio
    async def test_cannot_reconnect(self, fake_node):
        """A closed client cannot be reused."""
        client = GavelClient(ENDPOINT, transport=fake_node.transport)
        async with client:
            pass
        with pytest.raises(GavelError):
            await client.connect()

    @pytest.mark.asyncio
    async def test_request_before_connect(self, fake_node):
        """Requests need an open connection."""
        client = GavelClient(ENDPOINT, transport=fake_node.transport)
        with pytest.raises(RequestFailedError, match="not connected"):
            await client.get_head()


class TestRequest:
    """Request/response correlation."""

    @pytest.mark.asyncio
    async def test_returns_result(self, fake_node):
        """The result of the matching response is returned."""
        async with GavelClient(ENDPOINT, transport=fake_node.transport) as client:
            head = await client.get_head()

        assert head == "0x" + "ab" * 32
        request = fake_node.transport.sent[0]
        assert request["jsonrpc"] == "2.0"
        assert request["method"] == "chain_getHead"
        assert request["params"] == []
        assert len(request["id"]) == 10

    @pytest.mark.asyncio
    async def test_each_request_gets_fresh_id(self, fake_node):
        """Sequential requests use distinct ids."""
        async with GavelClient(ENDPOINT, transport=fake_node.transport) as client:
            await client.get_head()
            await client.get_head()
        ids = [r["id"] for r in fake_node.transport.sent]
        assert ids[0] != ids[1]

    @pytest.mark.asyncio
    async def test_discards_mismatched_and_stray_frames(self, make_transport):
        """Frames for other ids, notifications and binary frames are skipped."""
        transport = make_transport(lambda request: [
            {"jsonrpc": "2.0", "id": "someoneelse", "result": "wrong"},
            {"jsonrpc": "2.0", "method": "chain_newHead", "params": {"result": {}}},
            b"\x00\x01",
            _reply(request, "right"),
        ])
        async with _client(transport) as client:
            assert await client.request("anything", []) == "right"
        assert client.state is ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_remote_error(self, make_transport):
        """An error object for our id raises RemoteError and keeps the connection."""
        transport = make_transport(lambda request: [
            {"jsonrpc": "2.0", "id": request["id"], "error": {"code": -32601, "message": "Method not found", "data": "x"}},
        ])
        async with _client(transport) as client:
            with pytest.raises(RemoteError) as exc_info:
                await client.request("nope", [])
            assert client.state is ConnectionState.CONNECTED

        assert exc_info.value.code == -32601
        assert exc_info.value.data == "x"
        assert "Method not found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_frame_fails_request(self, make_transport):
        """A frame that is not JSON-RPC raises RequestFailedError and closes."""
        transport = make_transport(lambda request: ["this is not json"])
        async with _client(transport) as client:
            with pytest.raises(RequestFailedError, match="Invalid response frame"):
                await client.request("m", [])
            assert client.state is ConnectionState.CLOSED
        assert transport.closed

    @pytest.mark.asyncio
    async def test_null_id_error_fails_request(self, make_transport):
        """A protocol-level error (null id) raises RequestFailedError."""
        transport = make_transport(lambda request: [
            {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}},
        ])
        async with _client(transport) as client:
            with pytest.raises(RequestFailedError, match="Parse error"):
                await client.request("m", [])

    @pytest.mark.asyncio
    async def test_connection_closed_while_waiting(self, make_transport):
        """Socket closure before the response raises RequestFailedError."""
        transport = make_transport(lambda request: [RequestFailedError("Connection closed before receiving response")])
        async with _client(transport) as client:
            with pytest.raises(RequestFailedError, match="closed"):
                await client.request("m", [])
            assert client.state is ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_timeout(self, make_transport):
        """No response within request_timeout raises RequestTimeoutError and closes."""
        transport = make_transport(lambda request: [])
        async with _client(transport, request_timeout=0.05) as client:
            with pytest.raises(RequestTimeoutError):
                await client.request("m", [])
            assert client.state is ConnectionState.CLOSED
        assert transport.closed

    @pytest.mark.asyncio
    async def test_only_one_request_in_flight(self, make_transport):
        """A second concurrent request is refused."""
        transport = make_transport(lambda request: [])
        async with _client(transport, request_timeout=5) as client:
            first = asyncio.create_task(client.request("slow", []))
            await asyncio.sleep(0)
            assert client.state is ConnectionState.REQUEST_IN_FLIGHT
            with pytest.raises(RequestFailedError, match="in flight"):
                await client.request("second", [])
            first.cancel()
            with pytest.raises(asyncio.CancelledError):
                await first
        assert [r["method"] for r in transport.sent] == ["slow"]

    @pytest.mark.asyncio
    async def test_cancellation_closes_connection(self, make_transport):
        """Cancelling a waiting request (Ctrl+C) closes the socket."""
        transport = make_transport(lambda request: [])
        client = _client(transport, request_timeout=5)
        await client.connect()
        task = asyncio.create_task(client.request("slow", []))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert transport.closed
        assert client.state is ConnectionState.CLOSED


class TestNodeCalls:
    """Typed wrappers map to configured method names."""

    @pytest.mark.asyncio
    async def test_default_method_names_and_params(self, make_transport):
        """Default methods and parameter shapes."""
        transport = make_transport(lambda request: [_reply(request, None)])
        async with _client(transport) as client:
            await client.get_head()
            await client.get_block_hash(7)
            await client.get_block("0xabc")
            await client.generate_mmr_proof([10])

        assert [(r["method"], r["params"]) for r in transport.sent] == [
            ("chain_getHead", []),
            ("chain_getBlockHash", [7]),
            ("chain_getBlock", ["0xabc"]),
            ("mmr_generateProof", [[10]]),
        ]

    @pytest.mark.asyncio
    async def test_custom_method_names(self, make_transport):
        """Method names come from config."""
        transport = make_transport(lambda request: [_reply(request, "0x1")])
        methods = RpcMethodsConfig(get_head="chain_getFinalizedHead")
        async with _client(transport, methods=methods) as client:
            await client.get_head()
        assert transport.sent[0]["method"] == "chain_getFinalizedHead"

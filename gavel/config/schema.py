"""Pydantic models for gavel configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MAX_MESSAGE_SIZE = 64 * 1024 * 1024


class RpcMethodsConfig(BaseModel):
    """Node RPC method names.

    The defaults match Substrate-based nodes. Override them for nodes that
    expose the same calls under other names.

    Example in config.json:
        "methods": {
            "get_head": "chain_getFinalizedHead"
        }
    """

    model_config = ConfigDict(extra="forbid")

    get_head: str = "chain_getHead"
    """Returns the hash of the current head block. Params: []."""

    get_block_hash: str = "chain_getBlockHash"
    """Returns the hash of the block at a height. Params: [height]."""

    get_block: str = "chain_getBlock"
    """Returns a block (header + body) by hash. Params: [hash]."""

    generate_mmr_proof: str = "mmr_generateProof"
    """Generates an MMR proof. Params: [[heights...]]."""

    @field_validator("get_head", "get_block_hash", "get_block", "generate_mmr_proof")
    @classmethod
    def validate_method_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("method name must not be empty")
        return v.strip()


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "connect_timeout": 5,
            "request_timeout": 60,
            "verify_tls": true,
            "log_level": "INFO"
        }
    """

    model_config = ConfigDict(extra="forbid")

    connect_timeout: float = Field(default=10.0, gt=0)
    """Seconds allowed for TCP connect, TLS and the WebSocket handshake."""

    request_timeout: float = Field(default=30.0, gt=0)
    """Seconds to wait for the response to a single request."""

    verify_tls: bool = True
    """Verify the node's TLS certificate against the URL hostname."""

    max_message_size: int | None = Field(default=DEFAULT_MAX_MESSAGE_SIZE, ge=1)
    """Largest accepted WebSocket message in bytes (None for unlimited)."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    """Logging level for the gavel logger."""

    methods: RpcMethodsConfig = RpcMethodsConfig()

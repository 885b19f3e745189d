"""Configuration loading and validation."""

from gavel.config.loader import load_config
from gavel.config.schema import Config, RpcMethodsConfig

__all__ = [
    "Config",
    "RpcMethodsConfig",
    "load_config",
]

"""Configuration module for actionbridge."""

from actionbridge.config.loader import load_config, get_config_path, save_config
from actionbridge.config.schema import BridgeConfig, Config, ServerConfig

__all__ = [
    "BridgeConfig",
    "Config",
    "ServerConfig",
    "load_config",
    "save_config",
    "get_config_path",
]

"""Configuration schema using Pydantic.

Persisted to ~/.actionbridge/config.json; every field can also be set through
ACTIONBRIDGE_<SECTION>__<FIELD> environment variables.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """HTTP/WebSocket listener configuration."""
    host: str = "0.0.0.0"
    port: int = Field(default=80, ge=0, le=65535)
    log_level: str = "INFO"


class BridgeConfig(BaseModel):
    """Worker call correlation settings."""
    # Seconds a dispatched action waits for the worker's reply.
    call_timeout_seconds: float = Field(default=10.0, gt=0)


class Config(BaseSettings):
    """Root configuration for actionbridge."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)

    model_config = ConfigDict(
        env_prefix="ACTIONBRIDGE_",
        env_nested_delimiter="__",
    )

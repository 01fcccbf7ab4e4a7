"""
Pydantic models for server configuration.

Configuration is loaded once at startup and handed to the route table and
server lifecycle explicitly; nothing reads it through module globals.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


DEFAULT_INTROSPECTION_PORT = 61678


class ServerSettings(BaseModel):
    """Listener configuration."""

    host: str = Field(
        default="127.0.0.1",
        description="Host to bind the introspection server to",
    )
    port: int = Field(
        default=DEFAULT_INTROSPECTION_PORT,
        ge=1,
        le=65535,
        description="Port to listen on",
    )
    read_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds an idle connection may wait for the next request",
    )
    write_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds in-flight responses get to finish on stop",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )


class BackoffSettings(BaseModel):
    """
    Restart backoff for the serve loop.

    Each failed attempt waits the current delay (jittered by +/- jitter),
    then the delay grows by `multiple` until it reaches `maximum`.
    """

    minimum: float = Field(default=1.0, gt=0, description="Initial delay in seconds")
    maximum: float = Field(default=60.0, gt=0, description="Delay cap in seconds")
    multiple: float = Field(default=2.0, ge=1.0, description="Growth factor per failure")
    jitter: float = Field(default=0.2, ge=0.0, lt=1.0, description="Jitter fraction")

    @model_validator(mode="after")
    def validate_bounds(self) -> "BackoffSettings":
        """Ensure the cap is not below the initial delay."""
        if self.maximum < self.minimum:
            raise ValueError("backoff.maximum must be >= backoff.minimum")
        return self


class IntrospectionConfig(BaseModel):
    """
    Main configuration container for the introspection server.

    Loaded from YAML files and environment variables, then passed to server
    components via dependency injection.
    """

    server: ServerSettings = Field(default_factory=ServerSettings)
    backoff: BackoffSettings = Field(default_factory=BackoffSettings)

    # Allow extra fields to be ignored (forward compatibility)
    model_config = ConfigDict(extra="ignore")

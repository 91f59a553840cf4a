"""API server configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

ServeMode = Literal["stdio", "http"]


class APIConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Port number")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=False,
        description="Allow credentials in CORS",
    )
    default_group_id: str = Field(
        default="default",
        description="Group used when a request does not name one",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v


class MCPConfig(BaseModel):
    """Configuration for the MCP tool server."""

    mode: ServeMode = Field(default="stdio", description="Transport when serving")
    server_name: str = Field(default="engram", description="Name announced to MCP clients")
    mount_path: str = Field(default="/mcp", description="SSE mount point in http mode")

"""MCP server for Engram."""

from engram.mcp.server import MemoryTools, create_mcp_server

__all__ = ["MemoryTools", "create_mcp_server"]

"""Coolify MCP server: Coolify application lifecycle exposed as MCP tools."""

__version__ = "1.0.0"

"""MCP server bridging definition lookups to Language Server Protocol servers."""

__version__ = "0.1.0"

"""Exception hierarchy shared by the transport, bridge and tool layers."""

from __future__ import annotations

from typing import Any


class PathfinderError(Exception):
    """Base class for every failure surfaced to MCP callers."""


class ConfigError(PathfinderError):
    pass


class FramingError(PathfinderError):
    """Malformed header block, bad Content-Length, truncated or undecodable body."""


class ProtocolError(PathfinderError):
    """A well-framed message whose JSON-RPC or LSP shape is not what we expect."""


class RemoteError(PathfinderError):
    def __init__(self, method: str, payload: Any) -> None:
        self.method = method
        self.payload = payload
        message = payload.get("message") if isinstance(payload, dict) else None
        detail = message if isinstance(message, str) else repr(payload)
        super().__init__(f"LSP error for '{method}': {detail}")


class RequestTimeoutError(PathfinderError):
    def __init__(self, method: str, timeout: float) -> None:
        self.method = method
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s waiting for LSP response to '{method}'")


class ServerTerminatedError(PathfinderError):
    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"LSP server terminated unexpectedly before responding to '{method}'")


class ProcessLifecycleError(PathfinderError):
    """Spawn, kill or double-shutdown of the language server process."""


class DocumentError(PathfinderError):
    """The requested document cannot be resolved or read."""

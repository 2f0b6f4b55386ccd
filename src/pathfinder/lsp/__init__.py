from pathfinder.lsp.bridge import REQUEST_TIMEOUT, LspBridge
from pathfinder.lsp.errors import (
    ConfigError,
    DocumentError,
    FramingError,
    PathfinderError,
    ProcessLifecycleError,
    ProtocolError,
    RemoteError,
    RequestTimeoutError,
    ServerTerminatedError,
)
from pathfinder.lsp.transport import EOF, FramedTransport

__all__ = [
    "REQUEST_TIMEOUT",
    "ConfigError",
    "DocumentError",
    "EOF",
    "FramedTransport",
    "FramingError",
    "LspBridge",
    "PathfinderError",
    "ProcessLifecycleError",
    "ProtocolError",
    "RemoteError",
    "RequestTimeoutError",
    "ServerTerminatedError",
]

"""Ownership of one language server process and its JSON-RPC session.

An ``LspBridge`` spawns the server, performs the ``initialize`` handshake,
hands out monotonically increasing request ids and matches replies to them.
It is torn down exclusively through :meth:`LspBridge.shutdown`, which always
leaves the child process terminated.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pathfinder.lsp.errors import (
    ProcessLifecycleError,
    ProtocolError,
    RemoteError,
    RequestTimeoutError,
    ServerTerminatedError,
)
from pathfinder.lsp.transport import EOF, FramedTransport

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15.0


def directory_uri(path: Path) -> str:
    """Return a ``file://`` URI for a directory, always with a trailing slash."""
    uri = path.resolve().as_uri()
    return uri if uri.endswith("/") else f"{uri}/"


def _matches_id(candidate: Any, request_id: int) -> bool:
    # LSP ids may be numbers or strings; bool is an int subclass but never a valid id.
    if isinstance(candidate, bool):
        return False
    if isinstance(candidate, int):
        return candidate == request_id
    if isinstance(candidate, str):
        return candidate == str(request_id)
    return False


class LspBridge:
    def __init__(
        self,
        process: asyncio.subprocess.Process,
        transport: FramedTransport,
        workspace: Path,
        *,
        request_timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._process = process
        self._transport = transport
        self._workspace = workspace
        self._request_timeout = request_timeout
        self._next_request_id = 1
        self._closed = False

    @classmethod
    async def spawn(
        cls,
        command: str,
        args: Sequence[str],
        workspace: Path,
        *,
        request_timeout: float = REQUEST_TIMEOUT,
    ) -> LspBridge:
        """Start the language server; stderr is inherited for operator visibility."""
        logger.debug("Spawning LSP child process: %s %s", command, list(args))
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=str(workspace),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
            )
        except OSError as exc:
            raise ProcessLifecycleError(f"failed to spawn language server process '{command}': {exc}") from exc

        if process.stdout is None or process.stdin is None:
            process.kill()
            await process.wait()
            raise ProcessLifecycleError("language server stdio not captured")

        transport = FramedTransport(process.stdout, process.stdin)
        return cls(process, transport, workspace, request_timeout=request_timeout)

    @classmethod
    async def start(
        cls,
        command: str,
        args: Sequence[str],
        workspace: Path,
        *,
        request_timeout: float = REQUEST_TIMEOUT,
    ) -> LspBridge:
        """Spawn and initialize; the process is killed if the handshake fails."""
        bridge = await cls.spawn(command, args, workspace, request_timeout=request_timeout)
        try:
            await bridge.initialize()
        except BaseException:
            await bridge.kill()
            raise
        return bridge

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def closed(self) -> bool:
        return self._closed

    async def initialize(self) -> None:
        root_uri = directory_uri(self._workspace)
        workspace_name = self._workspace.name or "workspace"
        params = {
            "processId": os.getpid(),
            "rootUri": root_uri,
            "rootPath": str(self._workspace),
            "capabilities": {},
            "workspaceFolders": [{"name": workspace_name, "uri": root_uri}],
        }
        await self.request("initialize", params)
        await self.notify("initialized", {})
        logger.debug("LSP handshake complete for %s", self._workspace)

    async def request(self, method: str, params: Any) -> Any:
        """Send a request and wait for its response, discarding unrelated traffic.

        The whole exchange is bounded by the request timeout; expiry fails this
        call only and leaves the session usable. A deadline that lands in the
        middle of a frame desynchronizes the stream, and later reads fail with
        ``FramingError`` instead of misparsing the remainder.
        """
        self._ensure_open()
        request_id = self._next_request_id
        self._next_request_id += 1
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        try:
            return await asyncio.wait_for(self._exchange(request_id, method, payload), self._request_timeout)
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(method, self._request_timeout) from exc

    async def notify(self, method: str, params: Any) -> None:
        self._ensure_open()
        await self._transport.write({"jsonrpc": "2.0", "method": method, "params": params})

    async def shutdown(self) -> None:
        """Run the LSP shutdown sequence, killing the process if any step fails.

        1. ``shutdown`` request; on failure kill immediately and return.
        2. ``exit`` notification; failure is logged only.
        3. Wait for the process, bounded by the request timeout.
        4. Kill on wait error or timeout.
        """
        self._ensure_open()
        logger.debug("Initiating graceful LSP shutdown")

        try:
            await self.request("shutdown", None)
        except Exception as exc:
            logger.warning("LSP shutdown request failed; forcing kill: %s", exc)
            await self.kill()
            return

        try:
            await self.notify("exit", None)
        except Exception as exc:
            logger.warning("Failed to send LSP exit notification; will still wait for process: %s", exc)

        try:
            status = await asyncio.wait_for(self._process.wait(), self._request_timeout)
        except asyncio.TimeoutError:
            logger.warning("Timed out after %gs waiting for LSP to exit; forcing kill", self._request_timeout)
            await self.kill()
            return
        except Exception as exc:
            logger.warning("Error waiting for LSP process; forcing kill: %s", exc)
            await self.kill()
            return

        logger.debug("LSP server exited with status %s", status)
        self._release()

    async def kill(self) -> None:
        """Force-terminate the process and wait until it is reaped."""
        if self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
            except OSError as exc:
                self._release()
                raise ProcessLifecycleError(f"failed to kill LSP process {self.pid}: {exc}") from exc
        await self._process.wait()
        self._release()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ProcessLifecycleError("LSP session has already been shut down")

    def _release(self) -> None:
        self._closed = True
        stdin = self._process.stdin
        if stdin is not None and not stdin.is_closing():
            stdin.close()

    async def _exchange(self, request_id: int, method: str, payload: dict[str, Any]) -> Any:
        await self._transport.write(payload)
        while True:
            message = await self._transport.read()
            if message is EOF:
                raise ServerTerminatedError(method)

            if not isinstance(message, dict):
                logger.warning("Received unexpected non-object message: %r", message)
                continue

            if "id" not in message:
                logger.debug("Discarding notification: %s", message.get("method"))
                continue

            # Server-initiated requests share the id space with our responses.
            if "method" in message:
                logger.debug("Discarding server request %r: %s", message["id"], message["method"])
                continue

            response_id = message["id"]
            if not _matches_id(response_id, request_id):
                logger.debug("Skipping response for different id: %r", response_id)
                continue

            if "result" in message:
                return message["result"]
            if "error" in message:
                raise RemoteError(method, message["error"])
            raise ProtocolError(f"invalid LSP response for '{method}': missing both result and error fields")

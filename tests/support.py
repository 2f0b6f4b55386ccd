"""In-memory stand-ins for streams, processes and language servers."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from pathfinder.lsp.bridge import LspBridge
from pathfinder.lsp.transport import EOF, FramedTransport


def encode_frame(message: Any) -> bytes:
    body = json.dumps(message).encode("utf-8")
    return f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body


def reader_with(data: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    if data:
        reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


async def decode_frames(data: bytes) -> list[Any]:
    transport = FramedTransport(reader_with(data), MemoryWriter())
    frames = []
    while (message := await transport.read()) is not EOF:
        frames.append(message)
    return frames


class MemoryWriter:
    """Collects written bytes and optionally forwards them to a reader."""

    def __init__(self, sink: asyncio.StreamReader | None = None) -> None:
        self.buffer = bytearray()
        self._sink = sink
        self.fail_with: Exception | None = None

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.buffer += data
        if self._sink is not None:
            self._sink.feed_data(data)

    async def drain(self) -> None:
        return None


class FakeProcess:
    """Mimics ``asyncio.subprocess.Process`` for shutdown tests."""

    def __init__(self, *, exits: bool = True, wait_error: Exception | None = None) -> None:
        self.pid = 4242
        self.returncode: int | None = None
        self.stdin = None
        self.kill_calls = 0
        self._exits = exits
        self._wait_error = wait_error
        self._killed = asyncio.Event()

    async def wait(self) -> int:
        if self.returncode is not None:
            return self.returncode
        if self._wait_error is not None:
            raise self._wait_error
        if self._exits:
            self.returncode = 0
            return 0
        await self._killed.wait()
        assert self.returncode is not None
        return self.returncode

    def kill(self) -> None:
        self.kill_calls += 1
        self.returncode = -9
        self._killed.set()


def make_bridge(
    replies: list[Any] | None = None,
    *,
    eof: bool = False,
    process: FakeProcess | None = None,
    request_timeout: float = 1.0,
    workspace: Path = Path("/tmp/project"),
) -> tuple[LspBridge, MemoryWriter, FakeProcess]:
    """Build a bridge whose server output is ``replies`` and whose input is captured."""
    data = b"".join(encode_frame(reply) for reply in replies or [])
    writer = MemoryWriter()
    proc = process or FakeProcess()
    transport = FramedTransport(reader_with(data, eof=eof), writer)
    bridge = LspBridge(proc, transport, workspace, request_timeout=request_timeout)  # type: ignore[arg-type]
    return bridge, writer, proc


class RecordingServer:
    """A ``LanguageServer`` that records calls and replays scripted replies."""

    def __init__(self, replies: list[Any] | None = None) -> None:
        self.notifications: list[tuple[str, Any]] = []
        self.requests: list[tuple[str, Any]] = []
        self._replies = list(replies or [])
        self.fail_notify: dict[str, Exception] = {}

    async def request(self, method: str, params: Any) -> Any:
        self.requests.append((method, params))
        reply = self._replies.pop(0) if self._replies else None
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def notify(self, method: str, params: Any) -> None:
        uri = params.get("textDocument", {}).get("uri") if isinstance(params, dict) else None
        error = self.fail_notify.get(uri) if uri else None
        if error is not None:
            raise error
        self.notifications.append((method, params))

    def methods(self) -> list[str]:
        return [method for method, _ in self.notifications]

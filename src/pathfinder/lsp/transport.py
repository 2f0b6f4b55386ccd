"""Content-Length framed JSON-RPC transport over a pair of asyncio byte streams."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

from pathfinder.lsp.errors import FramingError

logger = logging.getLogger(__name__)

_CONTENT_LENGTH = "content-length"


class _EndOfStream:
    def __repr__(self) -> str:
        return "EOF"


EOF: Any = _EndOfStream()
"""Returned by :meth:`FramedTransport.read` when the stream ends cleanly between frames."""


class ByteWriter(Protocol):
    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...


class FramedTransport:
    """Reads and writes LSP base-protocol frames.

    Knows nothing about requests or responses: one ``write`` produces one
    frame, one ``read`` consumes one frame.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: ByteWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._in_frame = False

    async def read(self) -> Any:
        """Return the next decoded payload, or :data:`EOF` if the stream ends before any header.

        A read cancelled after consuming part of a frame leaves the stream
        position unknown; every later read raises :class:`FramingError`.
        """
        if self._in_frame:
            raise FramingError("stream position lost after an interrupted read")
        headers = await self._read_headers()
        if headers is None:
            return EOF

        raw_length = headers.get(_CONTENT_LENGTH)
        if raw_length is None:
            raise FramingError("missing Content-Length header")
        try:
            length = int(raw_length)
        except ValueError as exc:
            raise FramingError(f"could not parse Content-Length header: {raw_length!r}") from exc
        if length < 0:
            raise FramingError(f"negative Content-Length header: {length}")

        try:
            body = await self._reader.readexactly(length)
        except asyncio.IncompleteReadError as exc:
            raise FramingError(
                f"unexpected EOF in payload body: got {len(exc.partial)} of {length} bytes"
            ) from exc
        self._in_frame = False

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FramingError(f"invalid JSON in framed payload: {exc}") from exc

    async def write(self, message: Any) -> None:
        try:
            body = json.dumps(message, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise FramingError(f"failed to serialize JSON payload: {exc}") from exc
        header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
        self._writer.write(header + body)
        await self._writer.drain()

    async def _read_headers(self) -> dict[str, str] | None:
        headers: dict[str, str] = {}
        while True:
            try:
                line = await self._reader.readline()
            except (asyncio.LimitOverrunError, ValueError) as exc:
                raise FramingError(f"header line too long: {exc}") from exc

            if not line:
                if not headers:
                    return None
                raise FramingError("unexpected EOF while reading headers")

            self._in_frame = True
            trimmed = line.decode("ascii", errors="replace").rstrip("\r\n")
            if not trimmed:
                if not headers:
                    continue
                return headers

            name, sep, value = trimmed.partition(":")
            if not sep:
                logger.warning("Ignoring non-header line from LSP: %s", trimmed)
                continue
            headers[name.strip().lower()] = value.strip()

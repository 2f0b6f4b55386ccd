"""Keep the language server's view of open documents in sync with disk.

Each URI is announced with ``textDocument/didOpen`` on first use. Later
accesses compare the file's modification time with the one recorded at the
last sync and send a whole-document ``textDocument/didChange`` only when the
file is strictly newer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from pathfinder.core.languages import language_id_for_path, uri_to_path
from pathfinder.core.ports.language_server import LanguageServer
from pathfinder.lsp.errors import DocumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentState:
    version: int
    mtime_ns: int


def _stat_mtime_ns(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError as exc:
        raise DocumentError(f"failed to read metadata for {path}: {exc}") from exc


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentError(f"failed to read {path}: {exc}") from exc


class DocumentManager:
    def __init__(self) -> None:
        self._open: dict[str, DocumentState] = {}

    def is_open(self, uri: str) -> bool:
        return uri in self._open

    def version(self, uri: str) -> int | None:
        state = self._open.get(uri)
        return state.version if state else None

    @property
    def open_uris(self) -> list[str]:
        return list(self._open)

    async def ensure_open(self, lsp: LanguageServer, uri: str) -> None:
        """Open, refresh, or skip ``uri`` depending on its on-disk modification time."""
        path = uri_to_path(uri)
        mtime_ns = await asyncio.to_thread(_stat_mtime_ns, path)
        state = self._open.get(uri)

        if state is not None and not state.mtime_ns < mtime_ns:
            logger.debug("Document already synchronized: %s", uri)
            return

        text = await asyncio.to_thread(_read_text, path)

        if state is None:
            logger.debug("Opening new document: %s", uri)
            await self._send_did_open(lsp, uri, language_id_for_path(path), 1, text)
            self._open[uri] = DocumentState(version=1, mtime_ns=mtime_ns)
            return

        logger.debug("Document modified, sending didChange: %s", uri)
        next_version = state.version + 1
        await self._send_did_change(lsp, uri, next_version, text)
        self._open[uri] = DocumentState(version=next_version, mtime_ns=mtime_ns)

    async def close(self, lsp: LanguageServer, uri: str) -> None:
        if self._open.pop(uri, None) is None:
            return
        await self._send_did_close(lsp, uri)

    async def close_all(self, lsp: LanguageServer) -> None:
        """Announce ``didClose`` for every tracked document, then forget them all.

        Individual failures are logged and do not stop the remaining closes.
        """
        for uri in list(self._open):
            try:
                await self._send_did_close(lsp, uri)
            except Exception as exc:
                logger.warning("Failed to close document %s: %s", uri, exc)
        self._open.clear()

    async def _send_did_open(self, lsp: LanguageServer, uri: str, language_id: str, version: int, text: str) -> None:
        params = {
            "textDocument": {
                "uri": uri,
                "languageId": language_id,
                "version": version,
                "text": text,
            }
        }
        await lsp.notify("textDocument/didOpen", params)

    async def _send_did_change(self, lsp: LanguageServer, uri: str, version: int, text: str) -> None:
        params = {
            "textDocument": {"uri": uri, "version": version},
            "contentChanges": [{"text": text}],
        }
        await lsp.notify("textDocument/didChange", params)

    async def _send_did_close(self, lsp: LanguageServer, uri: str) -> None:
        await lsp.notify("textDocument/didClose", {"textDocument": {"uri": uri}})

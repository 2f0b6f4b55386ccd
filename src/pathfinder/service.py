"""Session service tying the LSP bridge, document sync and tools together.

Concurrent callers take the document lock before the bridge lock, never the
other way round, and release the document lock before the query itself.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from types import TracebackType

from pathfinder.config import Config
from pathfinder.core.definition import DefinitionTool
from pathfinder.core.documents import DocumentManager
from pathfinder.core.languages import extension_from_uri
from pathfinder.lsp.bridge import REQUEST_TIMEOUT, LspBridge
from pathfinder.lsp.errors import ProcessLifecycleError
from pathfinder.models import DefinitionRequest, DefinitionResponse

logger = logging.getLogger(__name__)

BridgeFactory = Callable[..., Awaitable[LspBridge]]


class PathfinderService:
    def __init__(
        self,
        config: Config,
        workspace_base: Path,
        *,
        request_timeout: float = REQUEST_TIMEOUT,
        definition_tool: DefinitionTool | None = None,
        bridge_factory: BridgeFactory = LspBridge.start,
    ) -> None:
        self.config = config
        self.workspace_base = workspace_base
        self._request_timeout = request_timeout
        self._definition_tool = definition_tool or DefinitionTool()
        self._bridge_factory = bridge_factory
        self._lsp: LspBridge | None = None
        self._documents = DocumentManager()
        self._lsp_lock = asyncio.Lock()
        self._documents_lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._lsp is not None

    @property
    def documents(self) -> DocumentManager:
        return self._documents

    async def start(self) -> None:
        if self._lsp is not None:
            return
        workspace = self.config.server.resolve_root_dir(self.workspace_base)
        server = self.config.server
        logger.info(
            "Starting language server %s in %s (extensions: %s)",
            server.command,
            workspace,
            ", ".join(server.extensions),
        )
        self._lsp = await self._bridge_factory(
            server.executable,
            server.arguments,
            workspace,
            request_timeout=self._request_timeout,
        )

    async def prepare_document(self, uri: str) -> None:
        """Make sure the language server sees the current on-disk content of ``uri``."""
        lsp = self._require_bridge()
        extension = extension_from_uri(uri)
        if extension is None or not self.config.has_extension(extension):
            logger.debug("Syncing %s outside configured extensions: %s", uri, self.config.server.extensions)
        async with self._documents_lock, self._lsp_lock:
            await self._documents.ensure_open(lsp, uri)

    async def query_definition(self, request: DefinitionRequest) -> DefinitionResponse:
        lsp = self._require_bridge()
        async with self._lsp_lock:
            return await self._definition_tool.execute(lsp, request)

    async def definition(self, request: DefinitionRequest) -> DefinitionResponse:
        """Sync the target document, then run the definition query.

        Sync failures raise before any query reaches the server.
        """
        await self.prepare_document(request.uri)
        return await self.query_definition(request)

    async def shutdown(self) -> None:
        """Close every open document and shut the language server down."""
        lsp = self._lsp
        if lsp is None:
            return
        async with self._documents_lock, self._lsp_lock:
            if not lsp.closed:
                await self._documents.close_all(lsp)
                await lsp.shutdown()
            self._lsp = None
        logger.info("Language server stopped")

    async def __aenter__(self) -> PathfinderService:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.shutdown()

    def _require_bridge(self) -> LspBridge:
        if self._lsp is None:
            raise ProcessLifecycleError("language server is not running")
        return self._lsp


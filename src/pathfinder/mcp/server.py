"""FastMCP server exposing pathfinder tools."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from pathfinder.core.definition import DefinitionTool
from pathfinder.lsp.errors import PathfinderError
from pathfinder.models import DefinitionRequest
from pathfinder.service import PathfinderService

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "MCP server that bridges to Language Server Protocol (LSP) servers. "
    "Provides jump-to-definition and other LSP features."
)

_DESCRIPTOR = DefinitionTool.descriptor()
_PARAMS = _DESCRIPTOR["inputSchema"]["properties"]


def create_mcp_server(service: PathfinderService) -> FastMCP:
    """Create a FastMCP server whose lifespan starts and stops ``service``."""

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        await service.start()
        logger.info("MCP server ready")
        try:
            yield
        finally:
            await service.shutdown()

    mcp = FastMCP("pathfinder", instructions=INSTRUCTIONS, lifespan=lifespan)

    @mcp.tool(name=_DESCRIPTOR["name"], description=_DESCRIPTOR["description"])
    async def definition(
        uri: Annotated[str, Field(description=_PARAMS["uri"]["description"])],
        line: Annotated[int, Field(ge=0, description=_PARAMS["line"]["description"])],
        character: Annotated[int, Field(ge=0, description=_PARAMS["character"]["description"])],
    ) -> dict[str, Any]:
        request = DefinitionRequest(uri=uri, line=line, character=character)
        try:
            await service.prepare_document(request.uri)
        except (PathfinderError, OSError) as err:
            logger.warning("Failed to sync document before definition call: %s", err)
            raise ToolError(f"failed to prepare document: {err}") from err

        try:
            response = await service.query_definition(request)
        except (PathfinderError, OSError) as err:
            raise ToolError(f"definition failed: {err}") from err
        return response.model_dump()

    return mcp

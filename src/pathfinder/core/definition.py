"""``textDocument/definition`` with retries and reply normalization."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pathfinder.core.ports.language_server import LanguageServer
from pathfinder.lsp.errors import ProtocolError
from pathfinder.models import DefinitionRequest, DefinitionResponse, DefinitionTarget, TextRange

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY = 0.15

TOOL_NAME = "definition"
TOOL_DESCRIPTION = "Return LSP-backed jump-to-definition targets for a given URI and position"


class DefinitionTool:
    def __init__(self, max_attempts: int = MAX_ATTEMPTS, retry_delay: float = RETRY_DELAY) -> None:
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    @staticmethod
    def schema() -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "file:// URI of the document"},
                "line": {"type": "integer", "minimum": 0, "description": "Zero-based line index"},
                "character": {"type": "integer", "minimum": 0, "description": "Zero-based character index"},
            },
            "required": ["uri", "line", "character"],
        }

    @classmethod
    def descriptor(cls) -> dict[str, Any]:
        return {"name": TOOL_NAME, "description": TOOL_DESCRIPTION, "inputSchema": cls.schema()}

    async def execute(self, lsp: LanguageServer, request: DefinitionRequest) -> DefinitionResponse:
        """Query the server, retrying while the reply is empty.

        Servers often answer empty while still indexing, so an empty reply is
        retried after a short delay. Once attempts run out, an empty response
        is returned rather than an error.
        """
        params = {
            "textDocument": {"uri": request.uri},
            "position": {"line": request.line, "character": request.character},
        }

        for attempt in range(1, self.max_attempts + 1):
            raw = await lsp.request("textDocument/definition", params)
            targets = normalize_targets(raw)
            if targets:
                if attempt > 1:
                    logger.debug("Definition succeeded after retry %d for %s", attempt, request.uri)
                return DefinitionResponse(targets=targets)

            if attempt < self.max_attempts:
                logger.debug("Definition empty on attempt %d for %s, retrying", attempt, request.uri)
                await asyncio.sleep(self.retry_delay)

        logger.debug("No definition found for %s after %d attempts", request.uri, self.max_attempts)
        return DefinitionResponse()


def normalize_targets(value: Any) -> list[DefinitionTarget]:
    """Convert ``null`` / ``Location`` / ``Location[]`` / ``LocationLink[]`` into targets."""
    if value is None:
        return []
    if isinstance(value, list):
        return [_convert_location(entry) for entry in value]
    if isinstance(value, dict):
        return [_convert_location(value)]
    raise ProtocolError(f"unexpected definition response format: {value!r}")


def _convert_location(value: Any) -> DefinitionTarget:
    if not isinstance(value, dict):
        raise ProtocolError(f"definition entry must be an object: {value!r}")
    if "uri" in value:
        return _make_target(value, "uri", "range", "location")
    if "targetUri" in value:
        return _make_target(value, "targetUri", "targetRange", "locationLink")
    raise ProtocolError(f"definition entry missing required fields (expected 'uri' or 'targetUri'): {value!r}")


def _make_target(entry: dict[str, Any], uri_key: str, range_key: str, label: str) -> DefinitionTarget:
    uri = entry[uri_key]
    if not isinstance(uri, str):
        raise ProtocolError(f"{label}.{uri_key} must be a string")
    if range_key not in entry:
        raise ProtocolError(f"{label}.{range_key} missing")
    return DefinitionTarget(uri=uri, range=_parse_range(entry[range_key]))


def _parse_range(value: Any) -> TextRange:
    if not isinstance(value, dict):
        raise ProtocolError("range must be an object")
    if "start" not in value:
        raise ProtocolError("range.start missing")
    if "end" not in value:
        raise ProtocolError("range.end missing")
    start, end = value["start"], value["end"]
    return TextRange(
        start_line=_coord(start, "line", "start"),
        start_character=_coord(start, "character", "start"),
        end_line=_coord(end, "line", "end"),
        end_character=_coord(end, "character", "end"),
    )


def _coord(position: Any, name: str, label: str) -> int:
    raw = position.get(name) if isinstance(position, dict) else None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ProtocolError(f"range.{label}.{name} must be an unsigned integer")
    return raw

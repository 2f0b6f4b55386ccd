from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from pathfinder.lsp.errors import DocumentError

_EXTENSION_LANGUAGE_MAP = {
    "rs": "rust",
    "go": "go",
    "py": "python",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "js": "javascript",
    "jsx": "javascriptreact",
    "json": "json",
    "toml": "toml",
    "yaml": "yaml",
    "yml": "yaml",
    "md": "markdown",
}


def extension_of(path: Path) -> str:
    """Return the extension without its leading dot, or ``""``."""
    return path.suffix[1:]


def extension_from_uri(uri: str) -> str | None:
    ext = extension_of(Path(urlparse(uri).path))
    return ext or None


def language_id_for_path(path: Path) -> str:
    """Map a file extension to the LSP ``languageId`` sent in ``didOpen``.

    Unknown extensions are passed through verbatim; files without one are
    ``plaintext``.
    """
    ext = extension_of(path)
    if not ext:
        return "plaintext"
    return _EXTENSION_LANGUAGE_MAP.get(ext, ext)


def uri_to_path(uri: str) -> Path:
    """Resolve a ``file://`` URI to an existing local path."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise DocumentError(f"only file:// URIs are supported: {uri}")
    if parsed.netloc not in ("", "localhost"):
        raise DocumentError(f"only local file:// URIs are supported: {uri}")
    path = Path(url2pathname(parsed.path))
    if not path.exists():
        raise DocumentError(f"document path does not exist: {path}")
    return path

"""Framework-neutral handler for the documentation URL space.

The host application forwards GET requests here and translates the returned
``DocsResponse`` into its own response type. ``None`` means the path is not
ours (or names an asset that does not exist) and the host should carry on.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .support import ApiDocs

logger = logging.getLogger(__name__)

INITIALIZER_ASSET = "swagger-initializer.js"
INDEX_ASSET = "index.html"
PLACEHOLDER_DOCUMENT_URL = "https://petstore.swagger.io/v2/swagger.json"

_NONCE_TARGETS = re.compile(r'(rel="stylesheet"|script src="[^"]*")')
_ASSET_NAME = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9._-]*(/[A-Za-z0-9_-][A-Za-z0-9._-]*)*")
NOT_FOUND_CACHE_SIZE = 256

HTML = "text/html; charset=utf-8"
CONTENT_TYPES: Mapping[str, str] = {
    "html": HTML,
    "css": "text/css; charset=utf-8",
    "js": "text/javascript; charset=utf-8",
    "json": "application/json; charset=utf-8",
    "png": "image/png",
}


@dataclass(frozen=True)
class DocsResponse:
    status: int
    content_type: Optional[str] = None
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def redirect(cls, location: str) -> DocsResponse:
        return cls(status=302, headers={"Location": location})


def content_type_for(filename: str) -> str:
    """Content type by extension; unknown extensions are served as HTML."""
    _, _, extension = filename.rpartition(".")
    return CONTENT_TYPES.get(extension, HTML)


def inject_nonce(html: str, nonce: str) -> str:
    """Add ``nonce`` to every stylesheet link and script tag."""
    return _NONCE_TARGETS.sub(lambda match: f'{match.group(0)} nonce="{nonce}"', html)


class DocsEndpoint:
    """Serves the rendered documents and, optionally, the UI assets.

    UI assets are read from ``ui_dir`` (an unpacked swagger-ui distribution);
    nothing is bundled. Serving any file freezes ``docs`` against further
    route registration.
    """

    def __init__(self, docs: ApiDocs, ui_dir: Optional[Path] = None) -> None:
        self.docs = docs
        settings = docs.settings
        self.base_path = "/" + settings.path.strip("/")
        self.index_location = f"{self.base_path}/{INDEX_ASSET}"
        self.ui_dir = ui_dir if ui_dir is not None else settings.ui_dir
        self.provide_ui = settings.provide_ui and self.ui_dir is not None

        self._redirect_sources = {self.base_path, f"{self.base_path}/"}
        if settings.forward_root:
            self._redirect_sources.add("/")

        self._not_found: OrderedDict[str, None] = OrderedDict()
        self._assets: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def handle(self, request_path: str, nonce: Optional[str] = None) -> Optional[DocsResponse]:
        """Answer one GET request for ``request_path``."""
        if request_path in self._redirect_sources:
            return DocsResponse.redirect(self.index_location)

        prefix = f"{self.base_path}/"
        if not request_path.startswith(prefix):
            return None
        filename = request_path[len(prefix):]
        if not filename:
            return None

        self.docs.freeze()
        document = self.docs.document(filename)
        if document is not None:
            return DocsResponse(
                status=200,
                content_type=CONTENT_TYPES["json"],
                body=json.dumps(document).encode("utf-8"),
            )
        if not self.provide_ui:
            return None
        return self._serve_asset(filename, nonce)

    def _serve_asset(self, filename: str, nonce: Optional[str]) -> Optional[DocsResponse]:
        ui_dir = self.ui_dir
        if ui_dir is None or _ASSET_NAME.fullmatch(filename) is None:
            return None
        with self._lock:
            if filename in self._not_found:
                return None
            raw = self._assets.get(filename)
            if raw is None:
                raw = _read_asset(ui_dir, filename)
                if raw is None:
                    logger.debug("UI asset %s not found; caching miss", filename)
                    self._not_found[filename] = None
                    if len(self._not_found) > NOT_FOUND_CACHE_SIZE:
                        self._not_found.popitem(last=False)
                    return None
                self._assets[filename] = raw

        if filename == INITIALIZER_ASSET:
            text = raw.decode("utf-8").replace(
                PLACEHOLDER_DOCUMENT_URL, self.docs.default_filename
            )
            return DocsResponse(status=200, content_type=CONTENT_TYPES["js"], body=text.encode("utf-8"))
        if filename == INDEX_ASSET and nonce is not None:
            text = inject_nonce(raw.decode("utf-8"), nonce)
            return DocsResponse(status=200, content_type=HTML, body=text.encode("utf-8"))
        return DocsResponse(status=200, content_type=content_type_for(filename), body=raw)


def _read_asset(ui_dir: Path, filename: str) -> Optional[bytes]:
    root = ui_dir.resolve()
    candidate = (root / filename).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate.read_bytes()

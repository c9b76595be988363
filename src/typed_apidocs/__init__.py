"""Swagger 2.0 and OpenAPI 3 documents derived from typed route declarations."""

from __future__ import annotations

from .config import ConfigLoadError, DialectSettings, DocsSettings, InfoSettings, load_settings
from .derive import (
    DefaultValue,
    DeriveError,
    Description,
    Ignore,
    Long,
    ModelClass,
    Schema,
    TypeDeriver,
    resource,
)
from .metadata import (
    HttpMethod,
    RouteMetadata,
    RouteUsageError,
    created,
    example,
    not_found,
    ok,
    summary,
)
from .resolver import ResolveError
from .serving import DocsEndpoint, DocsResponse
from .support import ApiDocs, RegistrationClosedError

__all__ = [
    "ApiDocs",
    "ConfigLoadError",
    "DefaultValue",
    "DeriveError",
    "Description",
    "DialectSettings",
    "DocsEndpoint",
    "DocsResponse",
    "DocsSettings",
    "HttpMethod",
    "Ignore",
    "InfoSettings",
    "Long",
    "ModelClass",
    "RegistrationClosedError",
    "ResolveError",
    "RouteMetadata",
    "RouteUsageError",
    "Schema",
    "TypeDeriver",
    "created",
    "example",
    "load_settings",
    "not_found",
    "ok",
    "resource",
    "summary",
]

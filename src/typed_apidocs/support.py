"""Installation facade: one registration entry point feeding every dialect."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from .config import DocsSettings
from .derive import TypeDeriver
from .dialects import Customization, OpenApiVariation, SpecVariation, SwaggerVariation
from .json_types import MutableJSONObject
from .metadata import HttpMethod, Route, RouteMetadata
from .parameters import check_body_allowed

logger = logging.getLogger(__name__)


class RegistrationClosedError(RuntimeError):
    """Raised when a route is registered after documents have been served."""


class ApiDocs:
    """Collects route registrations into a swagger and/or openapi document.

    Registration happens during application setup. The first time a document
    is served the instance is frozen and further registrations are rejected.
    """

    def __init__(
        self,
        settings: Optional[DocsSettings] = None,
        *,
        swagger_customization: Optional[Customization] = None,
        openapi_customization: Optional[Customization] = None,
        deriver: Optional[TypeDeriver] = None,
    ) -> None:
        self.settings = settings or DocsSettings()
        self.deriver = deriver or TypeDeriver()
        info = self.settings.info.to_json()

        self.swagger: Optional[SwaggerVariation] = None
        self.openapi: Optional[OpenApiVariation] = None
        if self.settings.swagger is not None:
            self.swagger = SwaggerVariation(
                info=info,
                deriver=self.deriver,
                schemas=self.settings.swagger.schemas,
                customization=swagger_customization,
            )
        if self.settings.openapi is not None:
            self.openapi = OpenApiVariation(
                info=info,
                deriver=self.deriver,
                schemas=self.settings.openapi.schemas,
                customization=openapi_customization,
            )
        if self.swagger is None and self.openapi is None:
            raise ValueError("Swagger or OpenApi must be specified")

        self._frozen = False
        self._lock = threading.Lock()

    @property
    def variations(self) -> tuple[SpecVariation, ...]:
        return tuple(
            variation for variation in (self.swagger, self.openapi) if variation is not None
        )

    @property
    def default_filename(self) -> str:
        """Document the UI opens first: openapi when enabled, else swagger."""
        return self.variations[-1].filename

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        with self._lock:
            if not self._frozen:
                logger.debug("Freezing API documentation; no further routes accepted")
            self._frozen = True

    def register(
        self,
        method: HttpMethod,
        resource: Any,
        body: Any = None,
        metadata: Optional[RouteMetadata] = None,
    ) -> None:
        """Document one route in every active dialect.

        Args:
            method (HttpMethod): Route method.
            resource (Any): ``@resource``-decorated class or a resource descriptor.
            body (Any): Request body type, if the route accepts one.
            metadata (Optional[RouteMetadata]): Summary, responses and parameters.
        """
        route = Route(
            method=HttpMethod(method),
            resource=resource,
            body_type=body,
            metadata=metadata or RouteMetadata(),
        )
        with self._lock:
            if self._frozen:
                raise RegistrationClosedError(
                    f"Cannot register {route.method.value.upper()} route after documents were served"
                )
            resource_descriptor = self.deriver.resource(route.resource)
            body_type = self.deriver.occurrence(body) if body is not None else None
            check_body_allowed(
                route.method,
                body_type,
                route.metadata.body_schema,
                resource_descriptor.path,
            )
            for variation in self.variations:
                variation.apply(route)

    def get(self, resource: Any, metadata: Optional[RouteMetadata] = None) -> None:
        self.register(HttpMethod.GET, resource, metadata=metadata)

    def delete(self, resource: Any, metadata: Optional[RouteMetadata] = None) -> None:
        self.register(HttpMethod.DELETE, resource, metadata=metadata)

    def post(self, resource: Any, body: Any, metadata: Optional[RouteMetadata] = None) -> None:
        self.register(HttpMethod.POST, resource, body, metadata)

    def put(self, resource: Any, body: Any, metadata: Optional[RouteMetadata] = None) -> None:
        self.register(HttpMethod.PUT, resource, body, metadata)

    def patch(self, resource: Any, body: Any, metadata: Optional[RouteMetadata] = None) -> None:
        self.register(HttpMethod.PATCH, resource, body, metadata)

    def document(self, filename: str) -> Optional[MutableJSONObject]:
        """Render the document served under ``filename``, if that dialect is active."""
        for variation in self.variations:
            if variation.filename == filename:
                return variation.document()
        return None

    def documents(self) -> dict[str, MutableJSONObject]:
        return {variation.filename: variation.document() for variation in self.variations}

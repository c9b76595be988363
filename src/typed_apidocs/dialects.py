"""Output dialects: the older ``swagger`` 2.0 and the newer ``openapi`` 3 layout.

Both dialects share resolution, naming and synthesis; each owns its schema
registry and path table and only decides how operations are laid out.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import ClassVar, Optional, TypeAlias

from .derive import TypeDeriver
from .json_types import JSONObject, JSONValue, MutableJSONObject
from .metadata import Example, HttpMethod, ResponseSpec, Route, RouteMetadata
from .naming import model_name, operation_key
from .parameters import (
    BodyOrigin,
    FromRawText,
    FromSchema,
    FromType,
    ParameterSpec,
    check_body_allowed,
    derive_body,
    derive_parameters,
)
from .registry import SchemaRegistry
from .schema_nodes import Primitive, Reference, SchemaNode

logger = logging.getLogger(__name__)

Customization: TypeAlias = Callable[[RouteMetadata, HttpMethod], RouteMetadata]

_JSON_MEDIA_TYPE = "application/json"
_TEXT_MEDIA_TYPE = "text/plain"


@dataclass(frozen=True)
class ResponseDescriptor:
    status: int
    description: str
    node: Optional[SchemaNode]
    examples: tuple[Example, ...] = ()


@dataclass(frozen=True)
class OperationDescriptor:
    """Everything known about one path+method before dialect rendering."""

    method: HttpMethod
    path: str
    summary: Optional[str]
    description: Optional[str]
    operation_id: Optional[str]
    tags: tuple[str, ...]
    parameters: tuple[ParameterSpec, ...]
    body: Optional[BodyOrigin]
    body_node: Optional[SchemaNode]
    responses: tuple[ResponseDescriptor, ...]


class SpecVariation(ABC):
    """One output dialect with its own registry and path->method table."""

    dialect: ClassVar[str]
    ref_prefix: ClassVar[str]
    filename: ClassVar[str]

    def __init__(
        self,
        *,
        info: JSONObject,
        deriver: TypeDeriver,
        schemas: Optional[Mapping[str, JSONObject]] = None,
        customization: Optional[Customization] = None,
    ) -> None:
        self.info: MutableJSONObject = dict(info)
        self.registry = SchemaRegistry()
        for name, payload in (schemas or {}).items():
            self.registry.seed(name, payload)
        self.paths: dict[str, dict[str, OperationDescriptor]] = {}
        self._deriver = deriver
        self._customization = customization
        self._lock = threading.Lock()

    def apply(self, route: Route) -> OperationDescriptor:
        """Document ``route``; the last registration for a path+method wins."""
        with self._lock:
            metadata = route.metadata
            if self._customization is not None:
                metadata = self._customization(metadata, route.method)
            operation = self._build_operation(route, metadata)
            key = operation_key(route.method)
            methods = self.paths.setdefault(operation.path, {})
            if key in methods:
                logger.warning(
                    "%s: replacing %s %s",
                    self.dialect,
                    route.method.value.upper(),
                    operation.path,
                )
            methods[key] = operation
            logger.info("%s: documented %s %s", self.dialect, route.method.value.upper(), operation.path)
            return operation

    def document(self) -> MutableJSONObject:
        """Render the whole document in this dialect's layout."""
        with self._lock:
            paths: MutableJSONObject = {
                path: {method: self.render_operation(operation) for method, operation in methods.items()}
                for path, methods in self.paths.items()
            }
            return self.render_document(paths, self.registry.to_json(self.ref_prefix))

    def _build_operation(self, route: Route, metadata: RouteMetadata) -> OperationDescriptor:
        deriver = self._deriver
        resource = deriver.resource(route.resource)
        body_type = deriver.occurrence(route.body_type) if route.body_type is not None else None
        check_body_allowed(route.method, body_type, metadata.body_schema, resource.path)

        derived = derive_parameters(
            resource,
            query_types=[deriver.descriptor(source) for source in metadata.query_types],
            header_types=[deriver.descriptor(source) for source in metadata.header_types],
        )
        body = derive_body(
            body_type,
            body_schema=metadata.body_schema,
            examples=metadata.body_examples,
        )

        body_node: Optional[SchemaNode] = None
        if isinstance(body, FromType):
            body_node = self.registry.schema_for(body.occurrence)
        elif isinstance(body, FromSchema):
            body_node = Reference(body.name)
        elif isinstance(body, FromRawText):
            body_node = Primitive("string")
        self.registry.register_all(derived.discovered)

        return OperationDescriptor(
            method=route.method,
            path=resource.path,
            summary=metadata.summary,
            description=metadata.description,
            operation_id=metadata.operation_id,
            tags=(resource.group,) if resource.group else (),
            parameters=derived.parameters,
            body=body,
            body_node=body_node,
            responses=tuple(self._response(spec) for spec in metadata.responses),
        )

    def _response(self, spec: ResponseSpec) -> ResponseDescriptor:
        node: Optional[SchemaNode] = None
        description = _status_phrase(spec.status)
        if spec.schema_name is not None:
            node = Reference(spec.schema_name)
            description = spec.schema_name
        elif spec.type is not None:
            occurrence = self._deriver.occurrence(spec.type)
            node = self.registry.schema_for(occurrence)
            if node is not None:
                description = model_name(occurrence)
        return ResponseDescriptor(
            status=spec.status,
            description=spec.description or description,
            node=node,
            examples=spec.examples,
        )

    def render_schema(self, node: SchemaNode) -> MutableJSONObject:
        return node.to_json(self.ref_prefix)

    def render_operation(self, operation: OperationDescriptor) -> MutableJSONObject:
        rendered: MutableJSONObject = {}
        _put(rendered, "summary", operation.summary)
        _put(rendered, "description", operation.description)
        _put(rendered, "operationId", operation.operation_id)
        if operation.tags:
            rendered["tags"] = list(operation.tags)
        rendered.update(self.render_operation_body(operation))
        rendered["responses"] = {
            str(response.status): self.render_response(response) for response in operation.responses
        }
        return rendered

    @abstractmethod
    def render_parameter(self, parameter: ParameterSpec) -> MutableJSONObject:
        """Render one path/query/header parameter."""

    @abstractmethod
    def render_operation_body(self, operation: OperationDescriptor) -> MutableJSONObject:
        """Render parameters and the request body, keyed as the dialect wants them."""

    @abstractmethod
    def render_response(self, response: ResponseDescriptor) -> MutableJSONObject:
        """Render one response."""

    @abstractmethod
    def render_document(
        self,
        paths: MutableJSONObject,
        schemas: MutableJSONObject,
    ) -> MutableJSONObject:
        """Wrap paths and registry contents into the dialect's root object."""


class SwaggerVariation(SpecVariation):
    """Swagger 2.0: definitions registry, body as an ``in: body`` parameter."""

    dialect = "swagger"
    ref_prefix = "#/definitions/"
    filename = "swagger.json"

    def render_parameter(self, parameter: ParameterSpec) -> MutableJSONObject:
        rendered: MutableJSONObject = {
            "name": parameter.name,
            "in": parameter.location.value,
            "description": parameter.description,
            "required": parameter.required,
        }
        schema = self.render_schema(parameter.node)
        if isinstance(parameter.node, Reference):
            rendered["schema"] = schema
        else:
            rendered.update(schema)
        _put(rendered, "default", parameter.default)
        return rendered

    def render_operation_body(self, operation: OperationDescriptor) -> MutableJSONObject:
        parameters: list[JSONValue] = []
        rendered: MutableJSONObject = {}
        if operation.body is not None and operation.body_node is not None:
            body_parameter: MutableJSONObject = {
                "name": "body",
                "in": "body",
                "description": _body_description(operation.body),
                "required": True,
                "schema": self.render_schema(operation.body_node),
            }
            if operation.body.examples:
                body_parameter["x-examples"] = {
                    example.name: example.value for example in operation.body.examples
                }
            parameters.append(body_parameter)
            media_type = _TEXT_MEDIA_TYPE if isinstance(operation.body, FromRawText) else _JSON_MEDIA_TYPE
            rendered["consumes"] = [media_type]
        parameters.extend(self.render_parameter(parameter) for parameter in operation.parameters)
        if any(response.node is not None for response in operation.responses):
            rendered["produces"] = [_JSON_MEDIA_TYPE]
        rendered["parameters"] = parameters
        return rendered

    def render_response(self, response: ResponseDescriptor) -> MutableJSONObject:
        rendered: MutableJSONObject = {"description": response.description}
        if response.node is not None:
            rendered["schema"] = self.render_schema(response.node)
        if response.examples:
            # Swagger 2.0 keys examples by media type, so only one fits.
            rendered["examples"] = {_JSON_MEDIA_TYPE: response.examples[0].value}
        return rendered

    def render_document(
        self,
        paths: MutableJSONObject,
        schemas: MutableJSONObject,
    ) -> MutableJSONObject:
        return {
            "swagger": "2.0",
            "info": dict(self.info),
            "paths": paths,
            "definitions": schemas,
        }


class OpenApiVariation(SpecVariation):
    """OpenAPI 3: component schemas, ``requestBody`` and media-typed content."""

    dialect = "openapi"
    ref_prefix = "#/components/schemas/"
    filename = "openapi.json"
    version = "3.0.3"

    def render_parameter(self, parameter: ParameterSpec) -> MutableJSONObject:
        schema = self.render_schema(parameter.node)
        _put(schema, "default", parameter.default)
        return {
            "name": parameter.name,
            "in": parameter.location.value,
            "description": parameter.description,
            "required": parameter.required,
            "schema": schema,
        }

    def render_operation_body(self, operation: OperationDescriptor) -> MutableJSONObject:
        rendered: MutableJSONObject = {
            "parameters": [self.render_parameter(parameter) for parameter in operation.parameters],
        }
        if operation.body is not None and operation.body_node is not None:
            media_type = _TEXT_MEDIA_TYPE if isinstance(operation.body, FromRawText) else _JSON_MEDIA_TYPE
            rendered["requestBody"] = {
                "description": _body_description(operation.body),
                "required": True,
                "content": {
                    media_type: self._media(operation.body_node, operation.body.examples),
                },
            }
        return rendered

    def render_response(self, response: ResponseDescriptor) -> MutableJSONObject:
        rendered: MutableJSONObject = {"description": response.description}
        if response.node is not None:
            rendered["content"] = {
                _JSON_MEDIA_TYPE: self._media(response.node, response.examples),
            }
        return rendered

    def render_document(
        self,
        paths: MutableJSONObject,
        schemas: MutableJSONObject,
    ) -> MutableJSONObject:
        return {
            "openapi": self.version,
            "info": dict(self.info),
            "paths": paths,
            "components": {"schemas": schemas},
        }

    def _media(self, node: SchemaNode, examples: tuple[Example, ...]) -> MutableJSONObject:
        media: MutableJSONObject = {"schema": self.render_schema(node)}
        if examples:
            media["examples"] = {example.name: _render_example(example) for example in examples}
        return media


def _render_example(example: Example) -> MutableJSONObject:
    rendered: MutableJSONObject = {}
    _put(rendered, "summary", example.summary)
    _put(rendered, "description", example.description)
    rendered["value"] = example.value
    return rendered


def _body_description(body: BodyOrigin) -> str:
    if isinstance(body, FromType):
        return model_name(body.occurrence)
    if isinstance(body, FromSchema):
        return body.name
    return "body"


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


def _put(target: MutableJSONObject, key: str, value: JSONValue) -> None:
    if value is not None:
        target[key] = value

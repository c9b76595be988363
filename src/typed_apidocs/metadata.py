"""Route-level documentation metadata supplied by the routing layer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from http import HTTPStatus
from typing import Any, Optional, Union

from .json_types import JSONValue


class RouteUsageError(ValueError):
    """Raised when a route is declared in a way its method does not allow."""


class HttpMethod(str, Enum):
    """HTTP methods a route can be documented for."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"

    @property
    def forbids_body(self) -> bool:
        """Whether the method's definition excludes a request body."""
        return self in _METHODS_FORBIDDING_BODY


_METHODS_FORBIDDING_BODY = frozenset({HttpMethod.GET, HttpMethod.HEAD, HttpMethod.DELETE})


@dataclass(frozen=True)
class Example:
    """Named example payload for a request body or response."""

    name: str
    value: JSONValue
    summary: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ResponseSpec:
    """One documented response.

    ``type`` is anything the type deriver accepts (a Python type or a
    descriptor); ``schema_name`` points at an author-supplied registry entry.
    """

    status: int
    type: Any = None
    schema_name: Optional[str] = None
    description: Optional[str] = None
    examples: tuple[Example, ...] = ()


@dataclass(frozen=True)
class BodySchema:
    """Marks a body as author-declared; ``None`` name falls back to the body type's name."""

    name: Optional[str] = None


@dataclass(frozen=True)
class RouteMetadata:
    """Summary, responses and parameter sources for one route."""

    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = None
    responses: tuple[ResponseSpec, ...] = ()
    body_examples: tuple[Example, ...] = ()
    body_schema: Optional[BodySchema] = None
    query_types: tuple[Any, ...] = ()
    header_types: tuple[Any, ...] = ()

    def responds(self, *responses: ResponseSpec) -> RouteMetadata:
        return replace(self, responses=(*self.responses, *responses))

    def describe(self, description: str) -> RouteMetadata:
        return replace(self, description=description)

    def with_operation_id(self, operation_id: str) -> RouteMetadata:
        return replace(self, operation_id=operation_id)

    def with_examples(self, *examples: Example) -> RouteMetadata:
        return replace(self, body_examples=(*self.body_examples, *examples))

    def no_reflection_body(self, name: Optional[str] = None) -> RouteMetadata:
        """Use an author-supplied schema for the body instead of its derived type."""
        return replace(self, body_schema=BodySchema(name))

    def with_parameters(self, *query_types: Any) -> RouteMetadata:
        return replace(self, query_types=(*self.query_types, *query_types))

    def with_headers(self, *header_types: Any) -> RouteMetadata:
        return replace(self, header_types=(*self.header_types, *header_types))


@dataclass(frozen=True)
class Route:
    """One route registration event as received from the routing layer."""

    method: HttpMethod
    resource: Any
    body_type: Any = None
    metadata: RouteMetadata = field(default_factory=RouteMetadata)


def summary(text: str) -> RouteMetadata:
    """Start route metadata from a summary line."""
    return RouteMetadata(summary=text)


def example(
    name: str,
    value: JSONValue,
    *,
    summary: Optional[str] = None,
    description: Optional[str] = None,
) -> Example:
    return Example(name=name, value=value, summary=summary, description=description)


def _response(
    status: HTTPStatus,
    target: Any,
    examples: tuple[Example, ...],
    description: Optional[str],
) -> ResponseSpec:
    if isinstance(target, str):
        return ResponseSpec(
            status=int(status),
            schema_name=target,
            description=description,
            examples=examples,
        )
    return ResponseSpec(status=int(status), type=target, description=description, examples=examples)


def ok(
    target: Union[Any, str] = None,
    *examples: Example,
    description: Optional[str] = None,
) -> ResponseSpec:
    """A 200 response; a string target names an author-supplied schema."""
    return _response(HTTPStatus.OK, target, examples, description)


def created(
    target: Union[Any, str] = None,
    *examples: Example,
    description: Optional[str] = None,
) -> ResponseSpec:
    return _response(HTTPStatus.CREATED, target, examples, description)


def not_found(description: Optional[str] = None) -> ResponseSpec:
    return ResponseSpec(status=int(HTTPStatus.NOT_FOUND), description=description)

"""Derive operation parameters and request-body origins for a route."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeAlias, Union

from .metadata import BodySchema, Example, HttpMethod, RouteUsageError
from .model_types import (
    STRING,
    PropertyDescriptor,
    ResourceDescriptor,
    TypeDescriptor,
    TypeKind,
    TypeOccurrence,
)
from .naming import model_name, path_parameter_names
from .resolver import concrete_descriptor
from .schema_nodes import Reference, SchemaNode
from .synthesizer import synthesize_property


class ParameterLocation(str, Enum):
    """Where a parameter is carried in the request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


@dataclass(frozen=True)
class ParameterSpec:
    """A dialect-neutral operation parameter."""

    name: str
    location: ParameterLocation
    required: bool
    node: SchemaNode
    description: str
    default: Optional[str] = None


@dataclass(frozen=True)
class FromType:
    """Body documented from its declared type."""

    occurrence: TypeOccurrence
    examples: tuple[Example, ...] = ()


@dataclass(frozen=True)
class FromSchema:
    """Body documented by an author-supplied schema name."""

    name: str
    examples: tuple[Example, ...] = ()


@dataclass(frozen=True)
class FromRawText:
    """Opaque string body."""

    examples: tuple[Example, ...] = ()


BodyOrigin: TypeAlias = Union[FromType, FromSchema, FromRawText]


@dataclass(frozen=True)
class DerivedParameters:
    parameters: tuple[ParameterSpec, ...]
    discovered: tuple[TypeOccurrence, ...]


def derive_parameters(
    resource: ResourceDescriptor,
    *,
    query_types: Sequence[TypeDescriptor] = (),
    header_types: Sequence[TypeDescriptor] = (),
) -> DerivedParameters:
    """Turn resource members and extra parameter types into parameters.

    Resource members become ``path`` parameters when the route template has a
    matching placeholder and ``query`` parameters otherwise; members of
    ``query_types`` are always ``query`` and members of ``header_types`` are
    always ``header``.

    Args:
        resource (ResourceDescriptor): Routed resource with its path template.
        query_types (Sequence[TypeDescriptor]): Extra query parameter sources.
        header_types (Sequence[TypeDescriptor]): Header parameter sources.

    Returns:
        DerivedParameters: Parameters in order plus object types to register.
    """
    placeholders = path_parameter_names(resource.path)
    parameters: list[ParameterSpec] = []
    discovered: list[TypeOccurrence] = []

    sources: list[tuple[TypeDescriptor, Optional[ParameterLocation]]] = [(resource.type, None)]
    sources.extend((source, ParameterLocation.QUERY) for source in query_types)
    sources.extend((source, ParameterLocation.HEADER) for source in header_types)

    for descriptor, forced_location in sources:
        enclosing = TypeOccurrence(descriptor)
        for prop in descriptor.properties:
            if prop.metadata.ignore:
                continue
            if forced_location is not None:
                location = forced_location
            elif prop.name in placeholders:
                location = ParameterLocation.PATH
            else:
                location = ParameterLocation.QUERY
            parameter, found = _parameter(prop, enclosing, location)
            parameters.append(parameter)
            discovered.extend(found)

    return DerivedParameters(parameters=tuple(parameters), discovered=tuple(discovered))


def _parameter(
    prop: PropertyDescriptor,
    enclosing: TypeOccurrence,
    location: ParameterLocation,
) -> tuple[ParameterSpec, tuple[TypeOccurrence, ...]]:
    synthesis = synthesize_property(prop, enclosing)
    return (
        ParameterSpec(
            name=prop.name,
            location=location,
            required=prop.required,
            node=synthesis.node,
            description=_parameter_description(prop, synthesis.node),
            default=prop.metadata.default_value,
        ),
        synthesis.discovered,
    )


def _parameter_description(prop: PropertyDescriptor, node: SchemaNode) -> str:
    if prop.metadata.description is not None:
        return prop.metadata.description
    if isinstance(node, Reference):
        return node.name
    return prop.name


def declares_body(body_type: Optional[TypeOccurrence], body_schema: Optional[BodySchema]) -> bool:
    if body_schema is not None:
        return True
    return body_type is not None and concrete_descriptor(body_type).kind is not TypeKind.UNIT


def check_body_allowed(
    method: HttpMethod,
    body_type: Optional[TypeOccurrence],
    body_schema: Optional[BodySchema],
    path: str,
) -> None:
    """Reject a body on a method whose definition excludes one."""
    if method.forbids_body and declares_body(body_type, body_schema):
        raise RouteUsageError(
            f"Method {method.value.upper()} does not support a body parameter (route {path})"
        )


def derive_body(
    body_type: Optional[TypeOccurrence],
    *,
    body_schema: Optional[BodySchema] = None,
    examples: tuple[Example, ...] = (),
) -> Optional[BodyOrigin]:
    """Choose how the request body is documented, or ``None`` for no body."""
    if body_schema is not None:
        name = body_schema.name
        if name is None:
            if body_type is None:
                raise RouteUsageError("An unnamed body schema needs a body type to name it")
            name = model_name(body_type)
        return FromSchema(name=name, examples=examples)

    if body_type is None:
        return None
    descriptor = concrete_descriptor(body_type)
    if descriptor.kind is TypeKind.UNIT:
        return None
    if descriptor == STRING:
        return FromRawText(examples=examples)
    return FromType(occurrence=body_type, examples=examples)

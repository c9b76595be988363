"""Map resolved type occurrences to schema nodes."""

from __future__ import annotations

from dataclasses import dataclass

from .model_types import PropertyDescriptor, TypeKind, TypeOccurrence
from .naming import model_name
from .resolver import ResolveError, concrete_descriptor, resolve
from .schema_nodes import ArrayNode, Enumeration, Primitive, Reference, SchemaNode


@dataclass(frozen=True)
class Synthesis:
    """A schema node plus the object occurrences it references.

    The discovered occurrences still have to be registered; synthesis itself
    never expands a referenced type's body.
    """

    node: SchemaNode
    discovered: tuple[TypeOccurrence, ...] = ()


def synthesize(occurrence: TypeOccurrence) -> Synthesis:
    """Return the node describing ``occurrence`` as seen from the outside."""
    descriptor = concrete_descriptor(occurrence)
    kind = descriptor.kind

    if kind is TypeKind.PRIMITIVE:
        if descriptor.primitive_type is None:
            raise ResolveError(f"Primitive {descriptor.name} has no schema type")
        return Synthesis(Primitive(descriptor.primitive_type, descriptor.primitive_format))

    if kind is TypeKind.ENUM:
        return Synthesis(
            Enumeration(tuple(constant.serialized for constant in descriptor.enum_constants))
        )

    if kind.is_collection:
        items = synthesize(collection_element(occurrence))
        return Synthesis(
            ArrayNode(items.node, unique_items=kind is TypeKind.SET),
            items.discovered,
        )

    if kind is TypeKind.OBJECT:
        return Synthesis(Reference(model_name(occurrence)), (occurrence,))

    raise ResolveError(f"Type {descriptor.name} ({kind.value}) cannot be used as a value")


def collection_element(occurrence: TypeOccurrence) -> TypeOccurrence:
    """Return the single element argument of a list-like or set-like occurrence."""
    if len(occurrence.arguments) != 1:
        raise ResolveError(
            f"Collection {concrete_descriptor(occurrence).name} needs exactly one element "
            f"type, got {len(occurrence.arguments)}"
        )
    return occurrence.arguments[0]


def synthesize_property(prop: PropertyDescriptor, enclosing: TypeOccurrence) -> Synthesis:
    """Synthesize a member property, honouring its schema and type overrides."""
    metadata = prop.metadata
    if metadata.schema_ref is not None:
        return Synthesis(Reference(metadata.schema_ref))
    declared = metadata.explicit_type if metadata.explicit_type is not None else prop.declared_type
    return synthesize(resolve(declared, enclosing))

"""Dialect-neutral schema nodes and their JSON rendering."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Optional, TypeAlias, Union

from .json_types import JSONObject, JSONValue, MutableJSONObject


@dataclass(frozen=True)
class Primitive:
    """Inline scalar schema, e.g. ``integer``/``int64``."""

    type: str
    format: Optional[str] = None

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        rendered: MutableJSONObject = {"type": self.type}
        if self.format is not None:
            rendered["format"] = self.format
        return rendered


@dataclass(frozen=True)
class Enumeration:
    """Inline string schema restricted to serialized enumeration constants."""

    values: tuple[str, ...]

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        return {"type": "string", "enum": list(self.values)}


@dataclass(frozen=True)
class ArrayNode:
    """Array schema; inline for properties, a named entry for top-level collections."""

    items: SchemaNode
    unique_items: bool = False

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        rendered: MutableJSONObject = {
            "type": "array",
            "items": self.items.to_json(ref_prefix),
        }
        if self.unique_items:
            rendered["uniqueItems"] = True
        return rendered


@dataclass(frozen=True)
class Reference:
    """Pointer to a named registry entry."""

    name: str

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        return {"$ref": f"{ref_prefix}{self.name}"}


@dataclass(frozen=True)
class ObjectNode:
    """Named object entry with its properties in declaration order."""

    properties: tuple[tuple[str, SchemaNode], ...]

    @property
    def property_map(self) -> dict[str, SchemaNode]:
        return dict(self.properties)

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        return {
            "type": "object",
            "properties": {
                name: node.to_json(ref_prefix) for name, node in self.properties
            },
        }


@dataclass(frozen=True, eq=False)
class RawSchema:
    """Author-supplied registry entry, rendered verbatim."""

    payload: JSONObject

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        return deepcopy(dict(self.payload))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RawSchema) and dict(self.payload) == dict(other.payload)

    __hash__ = None  # type: ignore[assignment]


SchemaNode: TypeAlias = Union[Primitive, Enumeration, ArrayNode, Reference, ObjectNode]
SchemaEntry: TypeAlias = Union[ObjectNode, ArrayNode, RawSchema]


def iter_references(value: JSONValue) -> list[str]:
    """Collect every ``$ref`` string inside a rendered JSON value."""
    found: list[str] = []
    if isinstance(value, Mapping):
        ref = value.get("$ref")
        if isinstance(ref, str):
            found.append(ref)
        for item in value.values():
            found.extend(iter_references(item))
    elif isinstance(value, list):
        for item in value:
            found.extend(iter_references(item))
    return found

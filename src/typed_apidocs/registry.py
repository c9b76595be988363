"""Write-once store of named schema definitions."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from .json_types import JSONObject, MutableJSONObject
from .model_types import TypeKind, TypeOccurrence
from .naming import model_name
from .resolver import concrete_descriptor
from .schema_nodes import ArrayNode, ObjectNode, RawSchema, Reference, SchemaEntry, SchemaNode
from .synthesizer import collection_element, synthesize, synthesize_property

logger = logging.getLogger(__name__)

_REGISTRABLE_KINDS = frozenset({TypeKind.OBJECT, TypeKind.LIST, TypeKind.SET})


class SchemaRegistry:
    """Named object/array definitions for one output dialect.

    Entries are never overwritten: the first registration under a name wins and
    later attempts are no-ops. A name is stored before the types its entry
    references are expanded, so cyclic type graphs terminate.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SchemaEntry] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def entries(self) -> Mapping[str, SchemaEntry]:
        return MappingProxyType(self._entries)

    def get(self, name: str) -> Optional[SchemaEntry]:
        return self._entries.get(name)

    def seed(self, name: str, payload: JSONObject) -> bool:
        """Store an author-supplied schema; returns whether it was stored."""
        if name in self._entries:
            return False
        self._entries[name] = RawSchema(payload)
        return True

    def register(self, occurrence: TypeOccurrence) -> Optional[str]:
        """Register ``occurrence`` and everything it references.

        Args:
            occurrence (TypeOccurrence): Concrete object or collection occurrence.

        Returns:
            Optional[str]: Registry name, or ``None`` for kinds that are always
            inlined (primitives, enumerations) or carry no content (unit).
        """
        if concrete_descriptor(occurrence).kind not in _REGISTRABLE_KINDS:
            return None

        pending: deque[TypeOccurrence] = deque([occurrence])
        while pending:
            current = pending.popleft()
            if concrete_descriptor(current).kind not in _REGISTRABLE_KINDS:
                continue
            name = model_name(current)
            if name in self._entries:
                continue
            entry, discovered = self._build_entry(current)
            self._entries[name] = entry
            logger.debug("Registered schema %s (%d reference(s) to follow)", name, len(discovered))
            pending.extend(discovered)
        return model_name(occurrence)

    def schema_for(self, occurrence: TypeOccurrence) -> Optional[SchemaNode]:
        """Node for a whole body or response type, registering it when named."""
        kind = concrete_descriptor(occurrence).kind
        if kind is TypeKind.UNIT:
            return None
        if kind in _REGISTRABLE_KINDS:
            name = self.register(occurrence)
            return Reference(name) if name is not None else None
        return synthesize(occurrence).node

    def register_all(self, occurrences: tuple[TypeOccurrence, ...]) -> None:
        for occurrence in occurrences:
            self.register(occurrence)

    def to_json(self, ref_prefix: str) -> MutableJSONObject:
        return {name: entry.to_json(ref_prefix) for name, entry in self._entries.items()}

    @staticmethod
    def _build_entry(
        occurrence: TypeOccurrence,
    ) -> tuple[SchemaEntry, tuple[TypeOccurrence, ...]]:
        descriptor = concrete_descriptor(occurrence)
        if descriptor.kind.is_collection:
            items = synthesize(collection_element(occurrence))
            return (
                ArrayNode(items.node, unique_items=descriptor.kind is TypeKind.SET),
                items.discovered,
            )

        properties: list[tuple[str, SchemaNode]] = []
        discovered: list[TypeOccurrence] = []
        for prop in descriptor.properties:
            if prop.metadata.ignore:
                continue
            synthesis = synthesize_property(prop, occurrence)
            properties.append((prop.name, synthesis.node))
            discovered.extend(synthesis.discovered)
        return ObjectNode(tuple(properties)), tuple(discovered)

"""Build type descriptors from Python declarations.

This is the one place that looks at Python classes and annotations. Everything
downstream (resolution, naming, synthesis) works on the descriptors produced
here, so descriptors can equally be written by hand.

Supported declarations:

* pydantic models, including generic models (``Page[T]`` and ``Page[Pet]``);
* dataclasses and plain annotated classes, including ``Generic[T]`` ones;
* ``enum.Enum`` subclasses, where a ``str`` value overrides the member name;
* ``list``/``Sequence``/``tuple[X, ...]`` and ``set``/``frozenset``;
* ``Optional[X]`` for nullable members and ``None`` for "no content".

Field-level overrides are attached with ``typing.Annotated``::

    class Pet(BaseModel):
        id: Annotated[Optional[int], Description("Identifier")]
        secret: Annotated[str, Ignore()]
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime
import enum
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, NewType, Optional, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from .model_types import (
    BOOLEAN,
    DATE,
    DATE_TIME,
    DOUBLE,
    INT,
    LIST,
    LONG,
    SET,
    STRING,
    UNIT,
    EnumConstant,
    FieldMetadata,
    PropertyDescriptor,
    ResourceDescriptor,
    TypeDescriptor,
    TypeOccurrence,
    TypeParameter,
)
from .resolver import ResolveError

Long = NewType("Long", int)
"""Annotate an ``int`` member that should be documented as ``int64``."""


class DeriveError(ResolveError):
    """Raised when a Python declaration has no descriptor equivalent."""


@dataclass(frozen=True)
class Ignore:
    """Leave the member out of schemas and parameter lists."""


@dataclass(frozen=True)
class DefaultValue:
    """Document a default; the member is never required."""

    value: str


@dataclass(frozen=True)
class Description:
    description: str


@dataclass(frozen=True)
class Schema:
    """Reference an author-supplied schema instead of deriving one."""

    schema: str


@dataclass(frozen=True)
class ModelClass:
    """Document the member as if it were declared with another type."""

    type: Any


_RESOURCE_ATTRIBUTE = "__apidocs_resource__"

DEFAULT_PRIMITIVES: Mapping[Any, TypeDescriptor] = {
    str: STRING,
    int: INT,
    Long: LONG,
    bool: BOOLEAN,
    float: DOUBLE,
    datetime.datetime: DATE_TIME,
    datetime.date: DATE,
}

_LIST_ORIGINS = frozenset(
    {
        list,
        tuple,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Collection,
        collections.abc.Iterable,
    }
)
_SET_ORIGINS = frozenset({set, frozenset, collections.abc.Set, collections.abc.MutableSet})
_UNPARAMETERIZED = frozenset({list, tuple, set, frozenset, dict})


@dataclass(frozen=True)
class _ResourceInfo:
    path: str
    group: Optional[str]


def resource(path: str, group: Optional[str] = None) -> Callable[[type], type]:
    """Class decorator marking a routed resource and its path template."""

    def _decorator(cls: type) -> type:
        setattr(cls, _RESOURCE_ATTRIBUTE, _ResourceInfo(path=path, group=group))
        return cls

    return _decorator


class TypeDeriver:
    """Translate Python types into descriptors, caching one descriptor per class."""

    def __init__(self, primitives: Optional[Mapping[Any, TypeDescriptor]] = None) -> None:
        self._primitives: dict[Any, TypeDescriptor] = dict(DEFAULT_PRIMITIVES)
        if primitives:
            self._primitives.update(primitives)
        self._descriptors: dict[type, TypeDescriptor] = {}

    def occurrence(self, tp: Any) -> TypeOccurrence:
        """Return the occurrence for a type expression such as ``Page[Pet]``."""
        if isinstance(tp, TypeOccurrence):
            return tp
        if isinstance(tp, (TypeDescriptor, TypeParameter)):
            return TypeOccurrence(tp)
        if isinstance(tp, TypeVar):
            return TypeOccurrence(TypeParameter(tp.__name__))

        base, extras = _unwrap_annotated(tp)
        if extras:
            return self.occurrence(base)
        inner, nullable = _split_optional(tp)
        if nullable:
            return self.occurrence(inner)
        if tp is None or tp is type(None):
            return TypeOccurrence(UNIT)

        primitive = self._primitive(tp)
        if primitive is not None:
            return TypeOccurrence(primitive)

        origin = get_origin(tp)
        if origin is not None:
            return self._generic_alias(tp, origin)

        generic_metadata = _pydantic_generic_metadata(tp)
        if generic_metadata is not None and generic_metadata.get("origin") is not None:
            return TypeOccurrence(
                self.describe(generic_metadata["origin"]),
                tuple(self.occurrence(argument) for argument in generic_metadata["args"]),
            )

        if tp in _UNPARAMETERIZED:
            raise DeriveError(f"Collection {tp.__name__} needs an element type")
        if isinstance(tp, type):
            return TypeOccurrence(self.describe(tp))
        raise DeriveError(f"Unsupported type annotation {tp!r}")

    def describe(self, cls: type) -> TypeDescriptor:
        """Return the descriptor for a class, building it on first use."""
        cached = self._descriptors.get(cls)
        if cached is not None:
            return cached

        qualified_name = f"{cls.__module__}.{cls.__qualname__}"
        if issubclass(cls, enum.Enum):
            descriptor = TypeDescriptor.enumeration(
                cls.__name__,
                [_enum_constant(member) for member in cls],
                qualified_name=qualified_name,
            )
        else:
            descriptor = TypeDescriptor.object(
                cls.__name__,
                members=lambda: self._members(cls),
                type_parameters=[parameter.__name__ for parameter in _type_parameters(cls)],
                qualified_name=qualified_name,
            )
        self._descriptors[cls] = descriptor
        return descriptor

    def resource(self, target: Any) -> ResourceDescriptor:
        """Return the descriptor for a class decorated with :func:`resource`."""
        if isinstance(target, ResourceDescriptor):
            return target
        info = getattr(target, _RESOURCE_ATTRIBUTE, None)
        if not isinstance(info, _ResourceInfo):
            raise DeriveError(f"{target!r} is not decorated with @resource")
        return ResourceDescriptor(path=info.path, type=self.describe(target), group=info.group)

    def descriptor(self, target: Any) -> TypeDescriptor:
        """Return the descriptor whose members become parameters."""
        if isinstance(target, TypeDescriptor):
            return target
        if isinstance(target, type):
            return self.describe(target)
        raise DeriveError(f"Parameter source {target!r} must be a class or descriptor")

    def _primitive(self, tp: Any) -> Optional[TypeDescriptor]:
        try:
            return self._primitives.get(tp)
        except TypeError:
            return None

    def _generic_alias(self, tp: Any, origin: Any) -> TypeOccurrence:
        arguments = get_args(tp)
        if origin in _LIST_ORIGINS or origin in _SET_ORIGINS:
            if origin is tuple:
                if len(arguments) != 2 or arguments[1] is not Ellipsis:
                    raise DeriveError(f"Only homogeneous tuples are supported, got {tp!r}")
                arguments = arguments[:1]
            if len(arguments) != 1:
                raise DeriveError(f"Collection {tp!r} needs exactly one element type")
            collection = SET if origin in _SET_ORIGINS else LIST
            return TypeOccurrence(collection, (self.occurrence(arguments[0]),))
        if isinstance(origin, type) and not issubclass(origin, (dict, collections.abc.Mapping)):
            return TypeOccurrence(
                self.describe(origin),
                tuple(self.occurrence(argument) for argument in arguments),
            )
        raise DeriveError(f"Unsupported type annotation {tp!r}")

    def _members(self, cls: type) -> list[PropertyDescriptor]:
        if issubclass(cls, BaseModel):
            return self._pydantic_members(cls)
        return self._annotated_members(cls)

    def _pydantic_members(self, cls: type[BaseModel]) -> list[PropertyDescriptor]:
        members: list[PropertyDescriptor] = []
        for name, field_info in cls.model_fields.items():
            annotation, nullable = _split_optional(field_info.annotation)
            annotation, inner_extras = _unwrap_annotated(annotation)
            metadata = self._field_metadata(
                (*field_info.metadata, *inner_extras),
                description=field_info.description,
                ignore=field_info.exclude is True,
                default=field_info.default,
            )
            members.append(
                PropertyDescriptor(
                    name=name,
                    declared_type=self._declared(annotation, name, cls),
                    nullable=nullable,
                    metadata=metadata,
                )
            )
        return members

    def _annotated_members(self, cls: type) -> list[PropertyDescriptor]:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except NameError as exc:
            raise DeriveError(f"Cannot evaluate annotations of {cls.__qualname__}: {exc}") from exc

        defaults: dict[str, Any] = {}
        if dataclasses.is_dataclass(cls):
            for item in dataclasses.fields(cls):
                defaults[item.name] = item.default
            names = list(defaults)
        else:
            names = [
                name
                for name, hint in hints.items()
                if not name.startswith("_") and get_origin(hint) is not typing.ClassVar
            ]
            defaults = {name: getattr(cls, name, None) for name in names}

        members: list[PropertyDescriptor] = []
        for name in names:
            annotation, extras = _unwrap_annotated(hints[name])
            annotation, nullable = _split_optional(annotation)
            annotation, inner_extras = _unwrap_annotated(annotation)
            members.append(
                PropertyDescriptor(
                    name=name,
                    declared_type=self._declared(annotation, name, cls),
                    nullable=nullable,
                    metadata=self._field_metadata(
                        (*extras, *inner_extras),
                        default=defaults[name],
                    ),
                )
            )
        return members

    def _declared(self, annotation: Any, name: str, owner: type) -> TypeOccurrence:
        try:
            return self.occurrence(annotation)
        except DeriveError as exc:
            raise DeriveError(f"{owner.__qualname__}.{name}: {exc}") from exc

    def _field_metadata(
        self,
        extras: Any,
        *,
        description: Optional[str] = None,
        ignore: bool = False,
        default: Any = None,
    ) -> FieldMetadata:
        schema_ref: Optional[str] = None
        explicit_type: Optional[TypeOccurrence] = None
        default_value: Optional[str] = None
        for marker in extras:
            if isinstance(marker, Ignore):
                ignore = True
            elif isinstance(marker, DefaultValue):
                default_value = marker.value
            elif isinstance(marker, Description):
                description = marker.description
            elif isinstance(marker, Schema):
                schema_ref = marker.schema
            elif isinstance(marker, ModelClass):
                explicit_type = self.occurrence(marker.type)
        if default_value is None:
            default_value = _documented_default(default)
        return FieldMetadata(
            ignore=ignore,
            schema_ref=schema_ref,
            explicit_type=explicit_type,
            default_value=default_value,
            description=description,
        )


def _unwrap_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        return base, tuple(extras)
    return tp, ()


def _split_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``Optional[X]`` into ``(X, True)``; other types pass through."""
    origin = get_origin(tp)
    if origin is not Union and origin is not types.UnionType:
        return tp, False
    members = [member for member in get_args(tp) if member is not type(None)]
    if len(members) != 1:
        raise DeriveError(f"Unions of several types are not supported: {tp!r}")
    return members[0], len(members) != len(get_args(tp))


def _pydantic_generic_metadata(tp: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tp.__pydantic_generic_metadata__
    return None


def _type_parameters(cls: type) -> tuple[TypeVar, ...]:
    generic_metadata = _pydantic_generic_metadata(cls)
    if generic_metadata is not None:
        return tuple(generic_metadata["parameters"])
    return tuple(getattr(cls, "__parameters__", ()))


def _documented_default(value: Any) -> Optional[str]:
    """Render a scalar Python default the way it is documented; other defaults are not shown."""
    if isinstance(value, enum.Enum):
        return _enum_constant(value).serialized
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _enum_constant(member: enum.Enum) -> EnumConstant:
    if isinstance(member.value, str) and member.value != member.name:
        return EnumConstant(member.name, serial_name=member.value)
    return EnumConstant(member.name)


__all__ = [
    "DEFAULT_PRIMITIVES",
    "DefaultValue",
    "DeriveError",
    "Description",
    "Ignore",
    "Long",
    "ModelClass",
    "Schema",
    "TypeDeriver",
    "resource",
]

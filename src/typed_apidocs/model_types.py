"""Type descriptors consumed by resolution and schema synthesis."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Optional, TypeAlias, Union


class TypeKind(str, Enum):
    """How a nominal type is rendered into a schema."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    LIST = "list"
    SET = "set"
    OBJECT = "object"
    UNIT = "unit"

    @property
    def is_collection(self) -> bool:
        return self in (TypeKind.LIST, TypeKind.SET)


@dataclass(frozen=True)
class TypeParameter:
    """Reference to a generic parameter by name, e.g. ``T``."""

    name: str


@dataclass(frozen=True)
class EnumConstant:
    """One enumeration constant and its optional serialization-name override."""

    name: str
    serial_name: Optional[str] = None

    @property
    def serialized(self) -> str:
        return self.serial_name if self.serial_name is not None else self.name


MemberSource: TypeAlias = Union[
    Sequence["PropertyDescriptor"],
    Callable[[], Sequence["PropertyDescriptor"]],
]


@dataclass(frozen=True)
class TypeDescriptor:
    """Nominal type identity plus everything synthesis needs to know about it.

    ``members`` may be given as a callable so that descriptors which refer to
    themselves (directly or through other descriptors) can be constructed. The
    callable is invoked once, on first access of :attr:`properties`.
    """

    name: str
    kind: TypeKind
    qualified_name: str = ""
    type_parameters: tuple[str, ...] = ()
    primitive_type: Optional[str] = None
    primitive_format: Optional[str] = None
    enum_constants: tuple[EnumConstant, ...] = ()
    members: MemberSource = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.qualified_name:
            object.__setattr__(self, "qualified_name", self.name)

    @cached_property
    def properties(self) -> tuple[PropertyDescriptor, ...]:
        """Member properties in declaration order."""
        source = self.members
        if callable(source):
            source = source()
        return tuple(source)

    @classmethod
    def object(
        cls,
        name: str,
        *,
        members: MemberSource = (),
        type_parameters: Sequence[str] = (),
        qualified_name: str = "",
    ) -> TypeDescriptor:
        """Create a composite (object) descriptor."""
        return cls(
            name=name,
            kind=TypeKind.OBJECT,
            qualified_name=qualified_name,
            type_parameters=tuple(type_parameters),
            members=members,
        )

    @classmethod
    def enumeration(
        cls,
        name: str,
        constants: Sequence[Union[str, EnumConstant]],
        *,
        qualified_name: str = "",
    ) -> TypeDescriptor:
        """Create an enumeration descriptor; plain strings become constants."""
        return cls(
            name=name,
            kind=TypeKind.ENUM,
            qualified_name=qualified_name,
            enum_constants=tuple(
                constant if isinstance(constant, EnumConstant) else EnumConstant(constant)
                for constant in constants
            ),
        )

    @classmethod
    def primitive(
        cls,
        name: str,
        schema_type: str,
        schema_format: Optional[str] = None,
    ) -> TypeDescriptor:
        """Create a primitive descriptor rendered as ``type``/``format``."""
        return cls(
            name=name,
            kind=TypeKind.PRIMITIVE,
            primitive_type=schema_type,
            primitive_format=schema_format,
        )


@dataclass(frozen=True)
class TypeOccurrence:
    """A type used at a specific place, with its generic arguments.

    The identity is a :class:`TypeParameter` only in declared member types that
    have not been resolved against an enclosing instantiation yet.
    """

    identity: Union[TypeDescriptor, TypeParameter]
    arguments: tuple[TypeOccurrence, ...] = ()

    @property
    def is_type_parameter(self) -> bool:
        return isinstance(self.identity, TypeParameter)

    @property
    def is_concrete(self) -> bool:
        """Whether no type parameter remains anywhere in this occurrence."""
        if self.is_type_parameter:
            return False
        return all(argument.is_concrete for argument in self.arguments)


@dataclass(frozen=True)
class FieldMetadata:
    """Per-property overrides attached when the descriptor is built."""

    ignore: bool = False
    schema_ref: Optional[str] = None
    explicit_type: Optional[TypeOccurrence] = None
    default_value: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PropertyDescriptor:
    """A member property as declared on its owning type."""

    name: str
    declared_type: TypeOccurrence
    nullable: bool = False
    metadata: FieldMetadata = field(default_factory=FieldMetadata)

    @property
    def required(self) -> bool:
        """Required unless nullable or carrying a documented default."""
        return not (self.nullable or self.metadata.default_value is not None)


@dataclass(frozen=True)
class ResourceDescriptor:
    """A routed resource: path template, member properties and tag group."""

    path: str
    type: TypeDescriptor
    group: Optional[str] = None


TypeLike: TypeAlias = Union[TypeOccurrence, TypeDescriptor, TypeParameter]


def of(identity: TypeLike, *arguments: TypeLike) -> TypeOccurrence:
    """Build an occurrence, wrapping descriptors and parameters as needed."""
    if isinstance(identity, TypeOccurrence):
        if arguments:
            raise ValueError("Cannot add arguments to an existing occurrence")
        return identity
    return TypeOccurrence(identity, tuple(of(argument) for argument in arguments))


def param(name: str) -> TypeOccurrence:
    return TypeOccurrence(TypeParameter(name))


def list_of(element: TypeLike) -> TypeOccurrence:
    return of(LIST, element)


def set_of(element: TypeLike) -> TypeOccurrence:
    return of(SET, element)


STRING = TypeDescriptor.primitive("String", "string")
INT = TypeDescriptor.primitive("Int", "integer", "int32")
LONG = TypeDescriptor.primitive("Long", "integer", "int64")
BOOLEAN = TypeDescriptor.primitive("Boolean", "boolean")
DOUBLE = TypeDescriptor.primitive("Double", "number", "double")
DATE_TIME = TypeDescriptor.primitive("DateTime", "string", "date-time")
DATE = TypeDescriptor.primitive("Date", "string", "date")

LIST = TypeDescriptor(name="List", kind=TypeKind.LIST, type_parameters=("E",))
SET = TypeDescriptor(name="Set", kind=TypeKind.SET, type_parameters=("E",))
UNIT = TypeDescriptor(name="Unit", kind=TypeKind.UNIT)

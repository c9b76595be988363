"""Unit tests for building descriptors from Python declarations."""

from __future__ import annotations

import datetime
from typing import Optional, Union

import pytest

from typed_apidocs.derive import DeriveError, Long, TypeDeriver
from typed_apidocs.model_types import (
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
    TypeKind,
    TypeParameter,
    of,
)

from .fixture_helpers import (
    ModelWithGenericList,
    Overrides,
    Page,
    Pair,
    Pet,
    PetResource,
    PetsResource,
    Rank,
    SearchResource,
    SubModelElement,
    TreeNode,
)


@pytest.fixture
def deriver() -> TypeDeriver:
    return TypeDeriver()


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (str, STRING),
        (int, INT),
        (Long, LONG),
        (bool, BOOLEAN),
        (float, DOUBLE),
        (datetime.datetime, DATE_TIME),
        (datetime.date, DATE),
        (None, UNIT),
    ],
)
def test_primitive_annotations(deriver: TypeDeriver, annotation: object, expected: object) -> None:
    """Built-in scalars map onto the shared primitive descriptors."""
    assert deriver.occurrence(annotation) == of(expected)


def test_optional_is_unwrapped(deriver: TypeDeriver) -> None:
    """Nullability is a property concern, not part of the occurrence."""
    assert deriver.occurrence(Optional[str]) == of(STRING)
    assert deriver.occurrence(int | None) == of(INT)


def test_collections(deriver: TypeDeriver) -> None:
    """List-like and set-like annotations become the two collection descriptors."""
    assert deriver.occurrence(list[int]) == of(LIST, INT)
    assert deriver.occurrence(tuple[str, ...]) == of(LIST, STRING)
    assert deriver.occurrence(frozenset[str]) == of(SET, STRING)


@pytest.mark.parametrize("annotation", [dict[str, int], list, Union[int, str], tuple[int, str]])
def test_unsupported_annotations(deriver: TypeDeriver, annotation: object) -> None:
    """Shapes without a descriptor equivalent fail at derive time."""
    with pytest.raises(DeriveError):
        deriver.occurrence(annotation)


def test_generic_dataclass_instantiation(deriver: TypeDeriver) -> None:
    """``Generic`` subscripts carry their arguments into the occurrence."""
    occurrence = deriver.occurrence(ModelWithGenericList[SubModelElement])
    descriptor = deriver.describe(ModelWithGenericList)

    assert occurrence == of(descriptor, deriver.describe(SubModelElement))
    assert descriptor.type_parameters == ("T",)
    (something,) = descriptor.properties
    assert something.declared_type == of(LIST, TypeParameter("T"))


def test_pydantic_generic_instantiation(deriver: TypeDeriver) -> None:
    """Parametrized pydantic models resolve back to their generic origin."""
    occurrence = deriver.occurrence(Page[Pet])
    assert occurrence.identity == deriver.describe(Page)
    assert occurrence.arguments == (of(deriver.describe(Pet)),)
    assert deriver.describe(Page).type_parameters == ("T",)


def test_multi_parameter_generic(deriver: TypeDeriver) -> None:
    """Arguments keep their declaration order."""
    occurrence = deriver.occurrence(Pair[str, int])
    assert [argument.identity for argument in occurrence.arguments] == [STRING, INT]


def test_pydantic_members(deriver: TypeDeriver) -> None:
    """Required-ness follows defaults and ``Optional``; markers become metadata."""
    properties = {prop.name: prop for prop in deriver.describe(Pet).properties}

    assert list(properties) == ["id", "name", "tag", "rank", "secret"]
    assert properties["id"].declared_type == of(LONG)
    assert properties["id"].required
    assert properties["name"].required
    assert not properties["tag"].required
    assert properties["tag"].nullable
    assert properties["secret"].metadata.ignore


def test_enum_serial_names(deriver: TypeDeriver) -> None:
    """A string value that differs from the member name overrides it."""
    descriptor = deriver.describe(Rank)
    assert descriptor.kind is TypeKind.ENUM
    assert [constant.serialized for constant in descriptor.enum_constants] == [
        "first",
        "second",
        "third",
    ]


def test_self_referencing_dataclass(deriver: TypeDeriver) -> None:
    """Members are built lazily so a type can mention itself."""
    descriptor = deriver.describe(TreeNode)
    children = descriptor.properties[1]
    assert children.declared_type == of(LIST, descriptor)
    assert children.metadata.default_value is None
    assert children.required, "factory defaults are not documented and do not relax required"


def test_override_markers(deriver: TypeDeriver) -> None:
    """``Schema`` and ``ModelClass`` markers land in the field metadata."""
    legacy, count = deriver.describe(Overrides).properties
    assert legacy.metadata.schema_ref == "LegacyBlob"
    assert count.metadata.explicit_type == of(INT)


def test_descriptors_are_cached(deriver: TypeDeriver) -> None:
    """One class always maps to the same descriptor object."""
    assert deriver.describe(Pet) is deriver.describe(Pet)


def test_resource_descriptor(deriver: TypeDeriver) -> None:
    """``@resource`` supplies the path template and tag group."""
    descriptor = deriver.resource(PetResource)
    assert descriptor.path == "/pets/{id}"
    assert descriptor.group == "pets"
    assert descriptor.type is deriver.describe(PetResource)


def test_undecorated_resource_is_rejected(deriver: TypeDeriver) -> None:
    """Only decorated classes can be routed."""
    with pytest.raises(DeriveError, match="not decorated"):
        deriver.resource(Pet)


def test_scalar_python_defaults_become_documented_defaults(deriver: TypeDeriver) -> None:
    """Plain defaults are rendered like ``DefaultValue`` markers, enums by serial name."""
    properties = {prop.name: prop for prop in deriver.describe(SearchResource).properties}

    assert properties["term"].metadata.default_value is None
    assert properties["term"].required
    assert properties["page"].metadata.default_value == "1"
    assert properties["exact"].metadata.default_value == "false"
    assert properties["order"].metadata.default_value == "third"
    assert not any(properties[name].required for name in ("page", "exact", "order"))


def test_marker_default_without_python_default(deriver: TypeDeriver) -> None:
    """A ``DefaultValue`` marker alone makes the member optional."""
    (limit,) = deriver.describe(PetsResource).properties
    assert limit.metadata.default_value == "20"
    assert not limit.required

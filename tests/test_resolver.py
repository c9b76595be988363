"""Unit tests for generic parameter substitution."""

from __future__ import annotations

import pytest

from typed_apidocs.model_types import (
    INT,
    STRING,
    TypeDescriptor,
    TypeOccurrence,
    list_of,
    of,
    param,
)
from typed_apidocs.resolver import ResolveError, binding_environment, resolve, resolve_in

_LEAF = TypeDescriptor.object("Leaf")
_BOX = TypeDescriptor.object("Box", type_parameters=["T"])
_PAIR = TypeDescriptor.object("Pair", type_parameters=["A", "B"])


def test_concrete_occurrence_is_returned_unchanged() -> None:
    """Resolution of a parameter-free occurrence is the identity."""
    declared = list_of(_LEAF)
    assert resolve(declared, of(_BOX, STRING)) is declared


def test_parameter_is_replaced_by_enclosing_argument() -> None:
    """``T`` inside ``Box<String>`` becomes ``String``."""
    assert resolve(param("T"), of(_BOX, STRING)) == of(STRING)


def test_parameters_are_replaced_inside_arguments() -> None:
    """Substitution walks nested argument lists."""
    declared = list_of(of(_PAIR, param("B"), param("A")))
    resolved = resolve(declared, of(_PAIR, STRING, INT))
    assert resolved == list_of(of(_PAIR, INT, STRING))
    assert resolved.is_concrete


def test_binding_environment_maps_parameters_positionally() -> None:
    """Parameter names bind to arguments in declaration order."""
    environment = binding_environment(of(_PAIR, STRING, _LEAF))
    assert environment == {"A": of(STRING), "B": of(_LEAF)}


def test_raw_generic_use_has_empty_environment() -> None:
    """A generic type used without arguments binds nothing."""
    assert binding_environment(of(_BOX)) == {}


def test_arity_mismatch_is_rejected() -> None:
    """Too few arguments for the declared parameters is an error."""
    with pytest.raises(ResolveError, match="declares 2 type parameter"):
        binding_environment(of(_PAIR, STRING))


def test_unbound_parameter_is_rejected() -> None:
    """A parameter missing from the environment fails fast."""
    with pytest.raises(ResolveError, match="Unbound type parameter 'T'"):
        resolve_in(param("T"), {})


def test_parameter_with_arguments_is_rejected() -> None:
    """Higher-kinded parameters are not supported."""
    with pytest.raises(ResolveError):
        resolve_in(TypeOccurrence(param("T").identity, (of(STRING),)), {"T": of(STRING)})

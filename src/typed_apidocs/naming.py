"""Naming helpers for registry keys and route templates."""

from __future__ import annotations

import re
from typing import Union

from .metadata import HttpMethod
from .model_types import TypeOccurrence
from .resolver import concrete_descriptor

_GENERIC_SEPARATOR = "Of"
_ARGUMENT_SEPARATOR = "And"

_PATH_PARAM_RE = re.compile(r"\{(?P<name>[^{}]+)\}")


def model_name(occurrence: TypeOccurrence) -> str:
    """Return the registry key for a resolved occurrence.

    ``Pair<A, B>`` becomes ``PairOfAAndB`` and nested instantiations chain, so
    ``Outer<Inner<Leaf>>`` becomes ``OuterOfInnerOfLeaf``.
    """
    name = concrete_descriptor(occurrence).name
    if not occurrence.arguments:
        return name
    arguments = _ARGUMENT_SEPARATOR.join(model_name(argument) for argument in occurrence.arguments)
    return f"{name}{_GENERIC_SEPARATOR}{arguments}"


def path_parameter_names(path: str) -> set[str]:
    """Return the placeholder names of a route template like ``/pets/{id}``."""
    return {match.group("name") for match in _PATH_PARAM_RE.finditer(path)}


def operation_key(method: Union[HttpMethod, str]) -> str:
    """Path-table key for a method: ``GET`` and ``get`` both become ``get``."""
    if isinstance(method, HttpMethod):
        return method.value
    return method.lower()

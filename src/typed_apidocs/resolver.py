"""Generic parameter substitution over type occurrences."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeAlias

from .model_types import TypeDescriptor, TypeOccurrence, TypeParameter


class ResolveError(RuntimeError):
    """Raised when a type occurrence cannot be made concrete."""


BindingEnvironment: TypeAlias = Mapping[str, TypeOccurrence]


def concrete_descriptor(occurrence: TypeOccurrence) -> TypeDescriptor:
    """Return the nominal descriptor of an occurrence that is not a bare parameter."""
    identity = occurrence.identity
    if isinstance(identity, TypeParameter):
        raise ResolveError(f"Type parameter {identity.name!r} is not resolved")
    return identity


def binding_environment(enclosing: TypeOccurrence) -> dict[str, TypeOccurrence]:
    """Map the declaring type's parameter names to the enclosing arguments.

    Args:
        enclosing (TypeOccurrence): Instantiation whose members are being resolved.

    Returns:
        dict[str, TypeOccurrence]: Parameter name to bound occurrence.
    """
    descriptor = concrete_descriptor(enclosing)
    parameters = descriptor.type_parameters
    arguments = enclosing.arguments
    if not arguments:
        # A raw use of a generic type leaves its parameters unbound; members that
        # mention them fail at lookup time.
        return {}
    if len(parameters) != len(arguments):
        raise ResolveError(
            f"{descriptor.name} declares {len(parameters)} type parameter(s) "
            f"but was given {len(arguments)} argument(s)"
        )
    return dict(zip(parameters, arguments))


def resolve(declared: TypeOccurrence, enclosing: TypeOccurrence) -> TypeOccurrence:
    """Resolve a member's declared type inside an enclosing instantiation."""
    return resolve_in(declared, binding_environment(enclosing))


def resolve_in(declared: TypeOccurrence, environment: BindingEnvironment) -> TypeOccurrence:
    """Substitute every type parameter in ``declared`` using ``environment``."""
    identity = declared.identity
    if isinstance(identity, TypeParameter):
        if declared.arguments:
            raise ResolveError(f"Type parameter {identity.name!r} cannot take arguments")
        bound = environment.get(identity.name)
        if bound is None:
            raise ResolveError(f"Unbound type parameter {identity.name!r}")
        return bound

    if not declared.arguments or declared.is_concrete:
        return declared

    return TypeOccurrence(
        identity,
        tuple(resolve_in(argument, environment) for argument in declared.arguments),
    )

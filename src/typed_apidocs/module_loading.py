"""Helpers for loading route declaration modules by file path."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys
from types import ModuleType
from typing import Any


class ModuleLoadError(RuntimeError):
    """Raised when a routes module cannot be imported or lacks the named object."""


def load_module_from_path(*, module_name: str, module_path: Path) -> ModuleType:
    """Load a module from file path and register it in ``sys.modules``.

    Args:
        module_name (str): Import name for the module.
        module_path (Path): File system path to the Python module.

    Returns:
        ModuleType: Imported Python module object.
    """
    if not module_path.is_file():
        raise ModuleLoadError(f"Routes module not found: {module_path}")
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"Unable to import module from: {module_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_object(*, module_path: Path, attribute: str) -> Any:
    """Fetch ``attribute`` from the module at ``module_path``; callables are invoked."""
    module = load_module_from_path(module_name=module_path.stem, module_path=module_path)
    try:
        value = getattr(module, attribute)
    except AttributeError as exc:
        raise ModuleLoadError(f"{module_path} has no attribute {attribute!r}") from exc
    if callable(value) and not isinstance(value, type):
        value = value()
    return value

"""Command line interface for rendering route documentation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from .config import ConfigLoadError
from .metadata import RouteUsageError
from .module_loading import ModuleLoadError, load_object
from .resolver import ResolveError
from .support import ApiDocs
from .verify import format_report, verify_docs


class CLIError(RuntimeError):
    """Raised when CLI execution fails."""


DIALECT_FILES = {"swagger": "swagger.json", "openapi": "openapi.json"}
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="typed-apidocs",
        description="Render swagger/openapi documents from typed route declarations",
    )
    parser.add_argument(
        "--routes",
        required=True,
        help="Path to a Python file that builds an ApiDocs instance",
    )
    parser.add_argument(
        "--object",
        default="docs",
        help="Name of the ApiDocs instance (or a factory returning one) in the routes file",
    )
    parser.add_argument(
        "--dialect",
        choices=sorted(DIALECT_FILES),
        default=None,
        help="Document to print; defaults to openapi when enabled",
    )
    parser.add_argument("--format", choices=("json", "yaml"), default="json")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check references and schemas instead of printing the document",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
    )
    return parser


def render(document: dict, output_format: str) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(document, sort_keys=False)
    return json.dumps(document, indent=2)


def _load_docs(routes: Path, attribute: str) -> ApiDocs:
    docs = load_object(module_path=routes, attribute=attribute)
    if not isinstance(docs, ApiDocs):
        raise CLIError(f"{routes}:{attribute} is {type(docs).__name__}, expected ApiDocs")
    return docs


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        docs = _load_docs(Path(args.routes), args.object)
    except (ModuleLoadError, ConfigLoadError, RouteUsageError, ResolveError, CLIError) as exc:
        parser.error(str(exc))
        return 2
    docs.freeze()

    if args.verify:
        report = verify_docs(docs)
        print(format_report(report))
        return 0 if report.ok else 1

    filename = DIALECT_FILES[args.dialect] if args.dialect else docs.default_filename
    document = docs.document(filename)
    if document is None:
        parser.error(f"The {args.dialect} dialect is disabled in these docs")
        return 2
    sys.stdout.write(render(document, args.format))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Consistency checks for rendered documents."""

from __future__ import annotations

from dataclasses import dataclass

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from openapi_python_client.schema import OpenAPI
from pydantic import ValidationError

from .dialects import OpenApiVariation, SpecVariation
from .schema_nodes import iter_references
from .support import ApiDocs


@dataclass(frozen=True)
class VerificationIssue:
    """One problem found in a rendered document."""

    dialect: str
    location: str
    message: str


@dataclass(frozen=True)
class VerificationReport:
    """Result of the verification phase."""

    checked_documents: int
    checked_schemas: int
    issues: tuple[VerificationIssue, ...]

    @property
    def ok(self) -> bool:
        return not self.issues


def verify_docs(docs: ApiDocs) -> VerificationReport:
    """Check every active dialect's document for dangling references and bad schemas.

    * every ``$ref`` points at an entry in the same dialect's registry;
    * every registry entry is itself a well-formed JSON Schema;
    * the ``openapi`` document parses as an OpenAPI 3 document.
    """
    issues: list[VerificationIssue] = []
    checked_schemas = 0
    for variation in docs.variations:
        document = variation.document()
        issues.extend(_dangling_references(variation, document))
        schemas = variation.registry.to_json(variation.ref_prefix)
        for name, schema in schemas.items():
            checked_schemas += 1
            issues.extend(_check_schema(variation.dialect, name, schema))
        if isinstance(variation, OpenApiVariation):
            try:
                OpenAPI.model_validate(document)
            except ValidationError as exc:
                issues.append(
                    VerificationIssue(
                        dialect=variation.dialect,
                        location="document",
                        message=short_text(str(exc)),
                    )
                )

    return VerificationReport(
        checked_documents=len(docs.variations),
        checked_schemas=checked_schemas,
        issues=tuple(issues),
    )


def format_report(report: VerificationReport) -> str:
    """Render report as CLI output text."""
    lines = [
        f"Verified documents: {report.checked_documents}",
        f"Verified schemas: {report.checked_schemas}",
        f"Issues: {len(report.issues)}",
    ]
    for issue in report.issues:
        lines.append(f"- {issue.dialect}: {issue.location}: {issue.message}")
    return "\n".join(lines)


def _dangling_references(variation: SpecVariation, document: object) -> list[VerificationIssue]:
    issues: list[VerificationIssue] = []
    for ref in iter_references(document):
        if not ref.startswith(variation.ref_prefix):
            issues.append(
                VerificationIssue(
                    dialect=variation.dialect,
                    location=ref,
                    message=f"reference does not start with {variation.ref_prefix}",
                )
            )
            continue
        name = ref[len(variation.ref_prefix):]
        if name not in variation.registry:
            issues.append(
                VerificationIssue(
                    dialect=variation.dialect,
                    location=ref,
                    message=f"no schema named {name!r}",
                )
            )
    return issues


def _check_schema(dialect: str, name: str, schema: object) -> list[VerificationIssue]:
    if not isinstance(schema, dict):
        return [VerificationIssue(dialect=dialect, location=name, message="schema is not an object")]
    try:
        validator_for(schema, default=Draft4Validator).check_schema(schema)
    except SchemaError as exc:
        return [VerificationIssue(dialect=dialect, location=name, message=exc.message)]
    return []


def short_text(value: str, *, limit: int = 160) -> str:
    """First line of ``value``, shortened for diagnostics."""
    text = value.splitlines()[0] if value else value
    return text if len(text) <= limit else f"{text[: limit - 3]}..."

"""
Schema Validation Utilities

Validates export job files against the bundled JSON schema.

- JSON Schema definition for the job format (export_job.schema.json)
- `validate_job()` reports every violation, not just the first
- Fail fast before any SizeSpec or ExportConfig is built
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Schema version constants
EXPORT_JOB_SCHEMA_VERSION = 1


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _format_path(parts) -> str:
    text = ""
    for part in parts:
        text += f"[{part}]" if isinstance(part, int) else (f".{part}" if text else str(part))
    return text


def validate_job(data: Any) -> None:
    """
    Validate an export job against the schema.

    Args:
        data: Parsed job JSON

    Raises:
        ValidationError: If data is invalid; ``path`` points at the first
            violation and ``errors`` lists all of them
    """
    if not isinstance(data, dict):
        raise ValidationError(
            f"Job must be a JSON object, got {type(data).__name__}",
            path="",
        )

    version = data.get("schema_version", EXPORT_JOB_SCHEMA_VERSION)
    if version != EXPORT_JOB_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported job schema version: {version} (expected {EXPORT_JOB_SCHEMA_VERSION})",
            path="schema_version",
        )

    validator = jsonschema.Draft7Validator(_load_schema("export_job"))
    violations = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    if violations:
        first = violations[0]
        raise ValidationError(
            f"Schema validation failed: {first.message}",
            path=_format_path(first.absolute_path),
            errors=[
                f"{_format_path(e.absolute_path) or '<root>'}: {e.message}"
                for e in violations
            ],
        )

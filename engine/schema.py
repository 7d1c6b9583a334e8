"""Structural validation against the canonical LevelDefinition JSON Schema.

The schema lives in ``contracts/level-definition.schema.json`` as data so that
every consumer (this service, the editor load path, the game runtime) checks
against the same artifact rather than a hand-maintained field list.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from models.level import ValidationDetail

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SCHEMA_CANDIDATE_PATHS = (
    PROJECT_ROOT.parent / "contracts" / "level-definition.schema.json",
    PROJECT_ROOT / "contracts" / "level-definition.schema.json",
)


class SchemaNotFoundError(FileNotFoundError):
    """Raised when no copy of the LevelDefinition schema can be located."""


def resolve_schema_path() -> Path:
    """Find the schema file, preferring a shared contracts dir above the project."""
    for candidate in SCHEMA_CANDIDATE_PATHS:
        if candidate.exists():
            return candidate
    checked = ", ".join(str(p) for p in SCHEMA_CANDIDATE_PATHS)
    raise SchemaNotFoundError(f"LevelDefinition schema not found. Checked: {checked}")


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    """Load and check the schema once per process."""
    with open(resolve_schema_path(), encoding="utf-8") as f:
        schema = json.load(f)
    Draft202012Validator.check_schema(schema)
    return schema


@lru_cache(maxsize=1)
def get_validator() -> Draft202012Validator:
    """Return the compiled validator for the LevelDefinition schema."""
    return Draft202012Validator(load_schema())


def _dotted(path: Any) -> str:
    """Flatten a jsonschema instance path (a deque of keys) to dot notation."""
    return ".".join(str(part) for part in path)


def _join(base: str, name: str) -> str:
    return f"{base}.{name}" if base else name


def _details_for(error: ValidationError) -> list[ValidationDetail]:
    """Convert one jsonschema error into one or more field details.

    ``required`` errors point at the missing property rather than its parent.
    ``additionalProperties`` errors produce one detail per rejected property.
    """
    base = _dotted(error.absolute_path)
    message = error.message or "failed schema validation"

    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [name for name in error.validator_value if name not in error.instance]
        if missing:
            # jsonschema reports each missing property as its own error whose
            # message starts with the repr of the property name.
            name = next((n for n in missing if message.startswith(repr(n))), missing[0])
            return [ValidationDetail(field=_join(base, name), keyword="required", message=message)]

    if error.validator == "additionalProperties" and isinstance(error.instance, dict):
        allowed = set(error.schema.get("properties", {}))
        extras = [name for name in error.instance if name not in allowed]
        if extras:
            return [
                ValidationDetail(
                    field=_join(base, name),
                    keyword="additionalProperties",
                    message=message,
                )
                for name in extras
            ]

    return [ValidationDetail(field=base or "$", keyword=str(error.validator), message=message)]


def _path_key(part: Any) -> tuple[bool, int, str]:
    """Sort key that orders array indices numerically (food.2 before food.10)."""
    if isinstance(part, int):
        return (True, part, "")
    return (False, 0, str(part))


def validate_structure(payload: Any) -> list[ValidationDetail]:
    """Validate a payload against the schema, collecting every violation.

    Returns:
        A list of details ordered by field path; empty if the payload is
        structurally valid.
    """
    errors = sorted(
        get_validator().iter_errors(payload),
        key=lambda e: [_path_key(part) for part in e.absolute_path],
    )
    details: list[ValidationDetail] = []
    for error in errors:
        details.extend(_details_for(error))
    return details

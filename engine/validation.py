"""Authoritative LevelDefinition validation for payloads arriving over HTTP."""

from typing import Any

from engine.bounds import validate_coordinate_bounds
from engine.schema import validate_structure
from models.level import ValidationDetail


def validate_level_payload(payload: Any) -> list[ValidationDetail]:
    """Run structural then bounds validation on an untrusted payload.

    The bounds pass only runs once the structure is known to be valid, and
    its details share the schema detail shape so callers see a single list.

    Returns:
        Every violation found; an empty list means the payload is valid.
    """
    details = validate_structure(payload)
    if details:
        return details
    return validate_coordinate_bounds(payload)

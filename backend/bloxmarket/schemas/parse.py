"""Boundary Parsing — converts pydantic failures into the domain ValidationError.

Invariants:
    - parse_input never lets pydantic.ValidationError escape
    - The first failing location becomes ValidationError.field; all failures
      are kept in ValidationError.details
    - non_nullable fields may be omitted from an update but never set to None
"""

from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from bloxmarket.core.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def parse_input(schema: type[M], data: dict) -> M:
    """Validate raw fields against schema or raise ValidationError."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]) or "__root__",
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ]
        first = details[0]
        raise ValidationError(
            f"{first['field']}: {first['message']}", first["field"], details,
        ) from exc


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not set to null")
    return value


def non_nullable(*fields: str):
    """Before-validator for optional update fields backed by NOT NULL columns."""
    return field_validator(*fields, mode="before")(_reject_null)

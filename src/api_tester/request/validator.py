"""Validates form values against field constraints before dispatch."""

import logging
import math
import re
from typing import Any

from pydantic import BaseModel

from api_tester.parser.base import FormField

logger = logging.getLogger(__name__)


class ValidationResult(BaseModel):
    valid: bool
    errors: dict[str, str]  # field name -> message


def validate_fields(fields: list[FormField], values: dict[str, Any]) -> ValidationResult:
    """Check values of the given (visible) fields.

    Returns a result whose ``errors`` holds one message per failing
    field. The first failing check of a field wins.
    """
    errors = {}
    for field in fields:
        error = _check_field(field, values.get(field.name))
        if error:
            errors[field.name] = error
    return ValidationResult(valid=not errors, errors=errors)


def _check_field(field: FormField, value: Any) -> str | None:
    if value is None or value == "":
        if field.required:
            return f"{field.label} ist erforderlich"
        return None

    if field.kind == "number":
        return _check_number(field, value)
    if field.kind in ("text", "textarea"):
        return _check_text(field, str(value))
    return None


def _check_number(field: FormField, value: Any) -> str | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return f"{field.label} muss eine Zahl sein"
    if math.isnan(number) or isinstance(value, bool):
        return f"{field.label} muss eine Zahl sein"

    if field.min is not None and number < field.min:
        return f"{field.label} muss mindestens {field.min} sein"
    if field.max is not None and number > field.max:
        return f"{field.label} darf maximal {field.max} sein"
    return None


def _check_text(field: FormField, text: str) -> str | None:
    if field.min_length is not None and len(text) < field.min_length:
        return f"{field.label} muss mindestens {field.min_length} Zeichen lang sein"
    if field.max_length is not None and len(text) > field.max_length:
        return f"{field.label} darf maximal {field.max_length} Zeichen lang sein"

    if field.pattern:
        try:
            matched = re.search(field.pattern, text)
        except re.error:
            logger.warning("Invalid pattern for field %r: %s", field.name, field.pattern)
            return None
        if not matched:
            return field.pattern_error or f"{field.label} hat ein ungültiges Format"
    return None

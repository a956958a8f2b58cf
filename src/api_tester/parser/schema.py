"""JSON Schema to form field mapping.

Converts the body schema of an operation into a flat list of
FormField models. Nested objects inside arrays are expanded into
``item_fields``; every other nested object is rendered as a text input.
"""

import logging
import re
from typing import Any

from .base import (
    ArrayField,
    BooleanSelectField,
    DateField,
    FormField,
    NumberField,
    Option,
    SelectField,
    ShowIf,
    TextareaField,
    TextField,
)
from .refs import deref

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
EMAIL_PATTERN_ERROR = "Bitte gültige E-Mail-Adresse eingeben"

BOOLEAN_OPTIONS = [
    Option(value=True, label="Ja"),
    Option(value=False, label="Nein"),
]

TEXTAREA_THRESHOLD = 100

FIELD_TYPES: dict[str, type] = {
    "text": TextField,
    "textarea": TextareaField,
    "number": NumberField,
    "date": DateField,
    "select": SelectField,
    "boolean-select": BooleanSelectField,
    "array": ArrayField,
}


def schema_to_fields(
    schema: dict,
    required_names: set[str] | frozenset[str] = frozenset(),
    document: dict | None = None,
    seen: frozenset[str] = frozenset(),
) -> list[FormField]:
    """Convert an object schema into fields, one per property in document order.

    ``seen`` carries the references expanded on the current branch so a
    schema that refers back to an ancestor stops expanding there.
    """
    document = document or {}
    resolved, seen = deref(schema, document, seen)
    if resolved is None or not isinstance(resolved.get("properties"), dict):
        return []

    required = set(resolved.get("required") or required_names)
    fields: list[FormField] = []

    for name, raw in resolved["properties"].items():
        if isinstance(raw, dict) and raw.get("$ref") in seen:
            logger.warning("Property %r refers back to %s, not expanded", name, raw["$ref"])
            fields.append(property_to_field(name, {}, name in required, document, seen))
            continue

        prop_schema, prop_seen = deref(raw, document, seen)
        if prop_schema is None:
            continue
        fields.append(property_to_field(name, prop_schema, name in required, document, prop_seen))

    return fields


def property_to_field(
    name: str,
    schema: dict,
    required: bool,
    document: dict | None = None,
    seen: frozenset[str] = frozenset(),
) -> FormField:
    """Convert one resolved property schema into a field."""
    attrs: dict[str, Any] = {
        "name": name,
        "label": schema.get("title") or format_label(name),
        "required": required,
    }
    kind = field_kind(schema)

    if kind == "array":
        attrs.update(array_items(schema.get("items"), document or {}, seen))
    elif kind == "select":
        attrs["options"] = enum_options(schema["enum"])
    elif kind == "boolean-select":
        attrs["options"] = BOOLEAN_OPTIONS

    attrs.update(constraints(kind, schema))
    attrs.update(metadata(schema))
    return FIELD_TYPES[kind](**attrs)


def field_kind(schema: dict) -> str:
    """Map a JSON Schema type (and format/enum) onto a field kind."""
    schema_type = schema.get("type")
    if schema_type == "array":
        return "array"
    if isinstance(schema.get("enum"), list) and schema["enum"]:
        return "select"
    if schema_type == "boolean":
        return "boolean-select"
    if schema_type in ("integer", "number"):
        return "number"
    if schema_type == "string":
        return _string_kind(schema)
    return "text"


def _string_kind(schema: dict) -> str:
    if schema.get("format") in ("date", "date-time"):
        return "date"
    max_length = schema.get("maxLength")
    if isinstance(max_length, int) and max_length > TEXTAREA_THRESHOLD:
        return "textarea"
    return "text"


def array_items(items: Any, document: dict, seen: frozenset[str] = frozenset()) -> dict[str, Any]:
    """Describe the items of an array schema as item_kind and friends."""
    if not isinstance(items, dict):
        return {"item_kind": "text"}

    if items.get("$ref") in seen:
        logger.warning("Array items refer back to %s, not expanded", items["$ref"])
        return {"item_kind": "object", "item_fields": []}

    item_schema, item_seen = deref(items, document, seen)
    if item_schema is None:
        return {"item_kind": "text"}

    if item_schema.get("type") == "object" or "properties" in item_schema:
        return {
            "item_kind": "object",
            "item_fields": schema_to_fields(item_schema, frozenset(), document, item_seen),
        }
    if isinstance(item_schema.get("enum"), list) and item_schema["enum"]:
        return {
            "item_kind": "select",
            "item_options": enum_options(item_schema["enum"], stringify=True),
        }
    if item_schema.get("type") in ("integer", "number"):
        return {"item_kind": "number"}
    return {"item_kind": "text"}


def enum_options(values: list, stringify: bool = False) -> list[Option]:
    """Build select options from enum values.

    Labels are always display strings; values keep their original scalar
    type unless ``stringify`` is set.
    """
    return [
        Option(value=display_value(v) if stringify else v, label=display_value(v))
        for v in values
    ]


def display_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def constraints(kind: str, schema: dict) -> dict[str, Any]:
    """Copy the validation keywords that are meaningful for ``kind``."""
    result: dict[str, Any] = {}

    if kind in ("text", "textarea"):
        for source, target in (("minLength", "min_length"), ("maxLength", "max_length")):
            if isinstance(schema.get(source), int):
                result[target] = schema[source]
        if schema.get("pattern"):
            result["pattern"] = schema["pattern"]
        elif schema.get("format") == "email":
            result["pattern"] = EMAIL_PATTERN
            result["pattern_error"] = EMAIL_PATTERN_ERROR

    elif kind == "number":
        if _is_number(schema.get("minimum")):
            result["min"] = schema["minimum"]
        if _is_number(schema.get("maximum")):
            result["max"] = schema["maximum"]
        if schema.get("type") == "integer":
            result["step"] = 1

    elif kind == "date":
        if schema.get("minimum") is not None:
            result["min"] = schema["minimum"]
        if schema.get("maximum") is not None:
            result["max"] = schema["maximum"]

    return result


def metadata(schema: dict, fallback: dict | None = None) -> dict[str, Any]:
    """Default, example, description and visibility rule.

    ``fallback`` is consulted for example and description when the
    schema itself has none (parameters keep them outside the schema).
    """
    fallback = fallback or {}
    result: dict[str, Any] = {}

    if "default" in schema:
        result["default_value"] = schema["default"]

    if "example" in schema:
        result["example_value"] = schema["example"]
    elif "example" in fallback:
        result["example_value"] = fallback["example"]

    description = fallback.get("description") or schema.get("description")
    if description:
        result["help_text"] = description

    show_if = fallback.get("x-show-if") or schema.get("x-show-if")
    if isinstance(show_if, dict) and show_if.get("field"):
        result["show_if"] = ShowIf(field=show_if["field"], value=show_if.get("value"))

    return result


def format_label(name: str) -> str:
    """Turn ``petName`` / ``pet_name`` / ``pet-name`` into ``Pet Name``."""
    label = re.sub(r"([A-Z])", r" \1", name)
    label = re.sub(r"[_-]", " ", label)
    label = re.sub(r"\b\w", lambda m: m.group(0).upper(), label)
    return label.strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

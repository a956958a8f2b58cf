"""OpenAPI parameter to form field mapping (query, path, header)."""

import logging
from typing import Any

from .base import FormField
from .refs import deref
from .schema import (
    BOOLEAN_OPTIONS,
    FIELD_TYPES,
    array_items,
    constraints,
    enum_options,
    field_kind,
    format_label,
    metadata,
)

logger = logging.getLogger(__name__)

SUPPORTED_LOCATIONS = ("query", "path", "header")


def parameters_to_fields(parameters: list | None, document: dict | None = None) -> list[FormField]:
    """Convert a parameter list into fields, keeping declaration order.

    ``$ref`` entries are resolved first; unresolvable entries and
    parameters outside query/path/header are skipped.
    """
    document = document or {}
    fields: list[FormField] = []

    for raw in parameters or []:
        param, _ = deref(raw, document)
        if param is None or not param.get("name"):
            continue
        if param.get("in") not in SUPPORTED_LOCATIONS:
            continue
        fields.append(_parameter_to_field(param, document))

    return fields


def merge_parameters(shared: list | None, own: list | None, document: dict | None = None) -> list:
    """Combine path-level and operation-level parameters.

    An operation parameter with the same name and location replaces
    the path-level one in place; new ones are appended.
    """
    document = document or {}
    merged: list = []
    index: dict[tuple[str, str], int] = {}

    for raw in [*(shared or []), *(own or [])]:
        param, _ = deref(raw, document)
        if param is None:
            merged.append(raw)
            continue
        key = (param.get("name"), param.get("in"))
        if key in index:
            merged[index[key]] = raw
        else:
            index[key] = len(merged)
            merged.append(raw)

    return merged


def _parameter_to_field(param: dict, document: dict) -> FormField:
    location = param["in"]
    schema, seen = deref(param.get("schema") or {}, document)
    schema = schema or {}

    attrs: dict[str, Any] = {
        "name": param["name"],
        "label": format_label(param["name"]),
        # path params are always required
        "required": bool(param.get("required")) or location == "path",
        "param_location": location,
    }
    kind = field_kind(schema)

    if kind == "array":
        attrs.update(array_items(schema.get("items"), document, seen))
    elif kind == "select":
        attrs["options"] = enum_options(schema["enum"], stringify=True)
    elif kind == "boolean-select":
        attrs["options"] = BOOLEAN_OPTIONS

    attrs.update(constraints(kind, schema))
    attrs.update(metadata(schema, fallback=param))
    return FIELD_TYPES[kind](**attrs)

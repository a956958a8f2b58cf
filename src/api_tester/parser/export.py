"""Export API descriptors back into an OpenAPI 3.0 document."""

from typing import Any
from urllib.parse import urlparse

from .base import APIDescriptor, ArrayField, FormField

EXPORT_TITLE = "API Test Framework Export"


def descriptors_to_openapi(descriptors: list[APIDescriptor]) -> dict:
    """Build an OpenAPI document with one operation per descriptor."""
    document: dict[str, Any] = {
        "openapi": "3.0.0",
        "info": {"title": EXPORT_TITLE, "version": "1.0.0"},
        "paths": {},
    }
    schemes: dict[str, dict] = {}

    for api in descriptors:
        path = endpoint_path(api.endpoint)
        operation: dict[str, Any] = {
            "summary": api.name,
            "description": api.description,
            "operationId": api.id,
            "tags": [api.tag],
            "responses": {"200": {"description": "Successful response"}},
        }

        parameters = [_field_to_parameter(f) for f in api.fields if f.param_location != "body"]
        if parameters:
            operation["parameters"] = parameters

        body_fields = [f for f in api.fields if f.param_location == "body"]
        if body_fields:
            operation["requestBody"] = {
                "content": {"application/json": {"schema": fields_to_schema(body_fields)}}
            }

        if api.auth.type != "none":
            name = _scheme_name(api)
            schemes[name] = _security_scheme(api)
            operation["security"] = [{name: []}]

        document["paths"].setdefault(path, {})[api.method.lower()] = operation

    if schemes:
        document["components"] = {"securitySchemes": schemes}
    return document


def endpoint_path(endpoint: str) -> str:
    """Path part of an absolute endpoint; relative endpoints pass through."""
    parsed = urlparse(endpoint)
    if parsed.scheme and parsed.netloc:
        return parsed.path or "/"
    return endpoint.split("?", 1)[0]


def fields_to_schema(fields: list[FormField]) -> dict:
    schema: dict[str, Any] = {"type": "object", "properties": {}}
    required = []
    for field in fields:
        schema["properties"][field.name] = field_to_property(field)
        if field.required:
            required.append(field.name)
    if required:
        schema["required"] = required
    return schema


def field_to_property(field: FormField) -> dict:
    prop: dict[str, Any] = {}

    match field.kind:
        case "number":
            prop["type"] = "integer" if field.step == 1 else "number"
            if field.min is not None:
                prop["minimum"] = field.min
            if field.max is not None:
                prop["maximum"] = field.max
        case "date":
            prop.update(type="string", format="date")
        case "text" | "textarea":
            prop["type"] = "string"
            if field.min_length is not None:
                prop["minLength"] = field.min_length
            if field.max_length is not None:
                prop["maxLength"] = field.max_length
            if field.pattern:
                prop["pattern"] = field.pattern
        case "boolean-select":
            prop["type"] = "boolean"
        case "select":
            prop.update(type="string", enum=[o.value for o in field.options])
        case "array":
            prop.update(type="array", items=_array_items(field))

    prop["title"] = field.label
    if field.help_text:
        prop["description"] = field.help_text
    if field.default_value is not None:
        prop["default"] = field.default_value
    if field.example_value is not None:
        prop["example"] = field.example_value
    return prop


def _array_items(field: ArrayField) -> dict:
    match field.item_kind:
        case "object":
            return fields_to_schema(field.item_fields or [])
        case "select":
            return {"type": "string", "enum": [o.value for o in field.item_options or []]}
        case "number":
            return {"type": "number"}
        case _:
            return {"type": "string"}


def _field_to_parameter(field: FormField) -> dict:
    schema = field_to_property(field)
    description = schema.pop("description", None)
    schema.pop("title", None)
    parameter: dict[str, Any] = {
        "name": field.name,
        "in": field.param_location,
        "required": field.required or field.param_location == "path",
        "schema": schema,
    }
    if description:
        parameter["description"] = description
    return parameter


def _scheme_name(api: APIDescriptor) -> str:
    if api.auth.type == "bearer":
        return "bearerAuth"
    return f"apiKey_{api.auth.key_location}_{api.auth.key_name}"


def _security_scheme(api: APIDescriptor) -> dict:
    if api.auth.type == "bearer":
        return {"type": "http", "scheme": "bearer"}
    return {"type": "apiKey", "name": api.auth.key_name, "in": api.auth.key_location}

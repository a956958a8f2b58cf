"""OpenAPI 3.x document converter.

Turns every operation of an OpenAPI document into an APIDescriptor:
parameters and JSON body properties become form fields, the first
security requirement becomes the auth descriptor.
"""

import logging
import re
from urllib.parse import urlparse

from .auth import extract_auth
from .base import APIDescriptor, FormField
from .parameters import merge_parameters, parameters_to_fields
from .refs import deref
from .schema import schema_to_fields

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete")
DEFAULT_TAG = "Sonstige"


class InvalidDocumentError(ValueError):
    """The document cannot be converted at all."""


def convert(
    document: dict,
    source_origin: str | None = None,
    base_url: str | None = None,
    selected_paths: list[str] | None = None,
) -> list[APIDescriptor]:
    """Convert an OpenAPI document into a list of APIDescriptor.

    ``source_origin`` resolves relative server URLs, ``base_url``
    replaces the server URL entirely, and ``selected_paths`` (entries
    like ``"GET /pets"``) limits the import to the named operations.
    """
    if not isinstance(document, dict) or not isinstance(document.get("paths"), dict):
        raise InvalidDocumentError('Invalid OpenAPI document: "paths" is missing')

    base = base_url if base_url is not None else server_base_url(document, source_origin)
    selected = set(selected_paths) if selected_paths is not None else None

    descriptors = []
    for path, path_item in document["paths"].items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            if selected is not None and f"{method.upper()} {path}" not in selected:
                continue

            descriptors.append(
                _convert_operation(path, method.lower(), operation, path_item, document, base)
            )

    return descriptors


def _convert_operation(
    path: str, method: str, operation: dict, path_item: dict, document: dict, base: str
) -> APIDescriptor:
    operation_id = operation.get("operationId")
    parameters = merge_parameters(path_item.get("parameters"), operation.get("parameters"), document)
    fields = _unique_fields(
        [
            *parameters_to_fields(parameters, document),
            *_body_fields(operation.get("requestBody"), document),
        ],
        f"{method.upper()} {path}",
    )
    tags = operation.get("tags") or []

    return APIDescriptor(
        id=slugify(operation_id or f"{method}_{path}"),
        name=operation.get("summary") or operation_id or f"{method.upper()} {path}",
        description=operation.get("description") or operation.get("summary") or "",
        endpoint=base + path,
        method=method.upper(),
        tag=str(tags[0]) if tags else DEFAULT_TAG,
        auth=extract_auth(document, operation),
        fields=fields,
    )


def _body_fields(request_body: dict | None, document: dict) -> list[FormField]:
    if not isinstance(request_body, dict):
        return []
    if "$ref" in request_body:
        request_body, _ = deref(request_body, document)
        if request_body is None:
            return []

    json_content = (request_body.get("content") or {}).get("application/json") or {}
    schema = json_content.get("schema")
    if not isinstance(schema, dict):
        return []
    return schema_to_fields(schema, frozenset(), document)


def _unique_fields(fields: list[FormField], operation: str) -> list[FormField]:
    seen: set[str] = set()
    result = []
    for field in fields:
        if field.name in seen:
            logger.warning("Duplicate field %r in %s dropped", field.name, operation)
            continue
        seen.add(field.name)
        result.append(field)
    return result


def server_base_url(document: dict, source_origin: str | None = None) -> str:
    """Base URL from ``servers[0]``, resolving relative URLs against the origin.

    Returns an empty string (and logs a warning) when no usable base
    can be derived.
    """
    servers = document.get("servers") or []
    if not servers or not isinstance(servers[0], dict):
        logger.warning("No server definition found in OpenAPI document")
        return ""

    server = servers[0]
    url = _apply_server_variables(server.get("url") or "", server.get("variables") or {})
    if not url:
        return ""

    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return url.rstrip("/")

    if not source_origin:
        logger.warning("Server URL %r is relative and no source origin is available", url)
        return ""
    return (source_origin.rstrip("/") + "/" + url.lstrip("/")).rstrip("/")


def _apply_server_variables(url: str, variables: dict) -> str:
    def substitute(match: re.Match) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return re.sub(r"\{([^}]+)\}", substitute, url)


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9_]", "_", value.lower())

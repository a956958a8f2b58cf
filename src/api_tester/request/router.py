"""Route form values into the parts of an HTTP request."""

from typing import Any
from urllib.parse import quote

from api_tester.parser.base import FormField, RequestAssembly

# Characters encodeURIComponent leaves alone.
_URI_SAFE = "-_.!~*'()"


def route(endpoint_template: str, values: dict[str, Any], fields: list[FormField]) -> RequestAssembly:
    """Place each field's value according to its parameter location.

    Fields are processed in order; empty values (None or "") are
    skipped. Path placeholders are substituted, query pairs appended
    after all substitutions, headers set verbatim and everything else
    goes into the JSON body unchanged.
    """
    endpoint = endpoint_template
    query: list[tuple[str, str]] = []
    headers: dict[str, str] = {}
    body: dict[str, Any] = {}

    for field in fields:
        value = values.get(field.name)
        if is_empty(value):
            continue

        match field.param_location:
            case "path":
                endpoint = endpoint.replace("{" + field.name + "}", encode(to_text(value)))
            case "query":
                items = value if isinstance(value, (list, tuple)) else [value]
                query.extend((field.name, to_text(item)) for item in items if not is_empty(item))
            case "header":
                headers[field.name] = to_text(value)
            case "body":
                body[field.name] = value

    return RequestAssembly(
        final_endpoint=append_query(endpoint, query),
        body_payload=body,
        headers=headers,
    )


def append_query(endpoint: str, pairs: list[tuple[str, str]]) -> str:
    if not pairs:
        return endpoint
    query = "&".join(f"{encode(name)}={encode(value)}" for name, value in pairs)
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{query}"


def encode(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_empty(value: Any) -> bool:
    return value is None or value == ""

"""Security requirement extraction."""

from .base import AuthDescriptor

DEFAULT_KEY_NAME = "X-API-Key"


def extract_auth(document: dict, operation: dict) -> AuthDescriptor:
    """Derive the auth descriptor from the operation's effective security.

    Only the first scheme of the first requirement is honoured.
    """
    security = operation.get("security")
    if security is None:
        security = document.get("security")
    if not security or not isinstance(security[0], dict) or not security[0]:
        return AuthDescriptor()

    scheme_name = next(iter(security[0]))
    schemes = (document.get("components") or {}).get("securitySchemes") or {}
    scheme = schemes.get(scheme_name)
    if not isinstance(scheme, dict):
        return AuthDescriptor()

    scheme_type = scheme.get("type")
    if scheme_type == "http" and str(scheme.get("scheme", "")).lower() == "bearer":
        return AuthDescriptor(type="bearer")
    if scheme_type == "apiKey":
        location = scheme.get("in")
        return AuthDescriptor(
            type="apikey",
            key_name=scheme.get("name") or DEFAULT_KEY_NAME,
            key_location=location if location in ("header", "query", "cookie") else "header",
        )
    return AuthDescriptor()

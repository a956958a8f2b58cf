"""Apply stored credentials to an assembled request."""

from api_tester.parser.base import AuthDescriptor, AuthSecret, RequestAssembly

from .router import append_query


def apply_auth(
    auth: AuthDescriptor, secret: AuthSecret | None, assembly: RequestAssembly
) -> RequestAssembly:
    """Return a copy of ``assembly`` carrying the credential.

    Bearer tokens go into ``Authorization``; API keys are placed in a
    header, the query string or a single ``Cookie`` header. Without a
    matching secret value the assembly is returned unchanged.
    """
    if secret is None:
        return assembly

    if auth.type == "bearer" and secret.token:
        return _with_header(assembly, "Authorization", f"Bearer {secret.token}")

    if auth.type == "apikey" and secret.api_key:
        key_name = auth.key_name or "X-API-Key"
        match auth.key_location or "header":
            case "header":
                return _with_header(assembly, key_name, secret.api_key)
            case "query":
                return assembly.model_copy(
                    update={
                        "final_endpoint": append_query(
                            assembly.final_endpoint, [(key_name, secret.api_key)]
                        )
                    }
                )
            case "cookie":
                # replaces any Cookie header set by a field
                return _with_header(assembly, "Cookie", f"{key_name}={secret.api_key}")

    return assembly


def _with_header(assembly: RequestAssembly, name: str, value: str) -> RequestAssembly:
    return assembly.model_copy(update={"headers": {**assembly.headers, name: value}})

"""Turn a descriptor and filled-in form values into a request assembly."""

from typing import Any

from api_tester.parser.base import APIDescriptor, AuthSecret, RequestAssembly

from .auth import apply_auth
from .form import visible_fields
from .router import route
from .validator import ValidationResult, validate_fields
from .variables import resolve_values, resolve_variables


def check_request(
    api: APIDescriptor,
    values: dict[str, Any],
    variables: dict[str, Any] | None = None,
) -> ValidationResult:
    """Validate the fields that are currently visible.

    Values are checked after ``{{name}}`` resolution, as they will be sent.
    """
    resolved = resolve_values(values, variables)
    return validate_fields(visible_fields(api.fields, resolved), resolved)


def build_request(
    api: APIDescriptor,
    values: dict[str, Any],
    secret: AuthSecret | None = None,
    variables: dict[str, Any] | None = None,
) -> RequestAssembly:
    """Route visible field values and apply the API's auth scheme.

    ``variables`` resolves ``{{name}}`` placeholders in the endpoint and
    in string values before routing.
    """
    resolved = resolve_values(values, variables)
    fields = visible_fields(api.fields, resolved)
    assembly = route(resolve_variables(api.endpoint, variables), resolved, fields)
    return apply_auth(api.auth, secret, assembly)

"""Environment variable placeholders (``{{name}}``)."""

import re
from typing import Any

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def resolve_variables(text: Any, variables: dict[str, Any] | None) -> Any:
    """Replace known ``{{name}}`` placeholders; anything else is left as is."""
    if not isinstance(text, str) or not variables:
        return text

    def substitute(match: re.Match) -> str:
        key = match.group(1)
        return str(variables[key]) if key in variables else match.group(0)

    return _PLACEHOLDER.sub(substitute, text)


def resolve_values(values: dict[str, Any], variables: dict[str, Any] | None) -> dict[str, Any]:
    """Resolve placeholders in string values and inside lists of strings."""
    resolved = {}
    for name, value in values.items():
        if isinstance(value, list):
            resolved[name] = [resolve_variables(v, variables) for v in value]
        else:
            resolved[name] = resolve_variables(value, variables)
    return resolved


def find_variables(text: Any) -> list[str]:
    """Placeholder names in first-seen order, without duplicates."""
    if not isinstance(text, str):
        return []
    return list(dict.fromkeys(_PLACEHOLDER.findall(text)))

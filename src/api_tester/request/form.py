"""Form state helpers: conditional visibility and initial values."""

from typing import Any

from api_tester.parser.base import APIDescriptor, FormField


def is_visible(field: FormField, values: dict[str, Any]) -> bool:
    """Evaluate the field's ``show_if`` rule against the current values."""
    if field.show_if is None:
        return True

    actual = values.get(field.show_if.field)
    expected = field.show_if.value
    accepted = expected if isinstance(expected, (list, tuple, set)) else [expected]
    # select controls hand back strings, so compare textual forms as well
    return actual in accepted or _text(actual) in {_text(v) for v in accepted}


def visible_fields(fields: list[FormField], values: dict[str, Any]) -> list[FormField]:
    return [f for f in fields if is_visible(f, values)]


def initial_values(api: APIDescriptor, replay: dict[str, Any] | None = None) -> dict[str, Any]:
    """Starting values for a form.

    Values replayed from a history entry win over field defaults;
    fields without either start empty.
    """
    values = {}
    for field in api.fields:
        if replay and replay.get(field.name) is not None:
            values[field.name] = replay[field.name]
        elif field.default_value is not None:
            values[field.name] = field.default_value
        else:
            values[field.name] = ""
    return values


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)

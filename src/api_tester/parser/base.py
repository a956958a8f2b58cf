"""Data models for converted API definitions and assembled requests.

The converter turns OpenAPI operations into these models; the request
layer consumes them. JSON encodings use camelCase keys and omit
attributes that are not set.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer
from pydantic.alias_generators import to_camel

ParamLocation = Literal["body", "query", "path", "header"]
KeyLocation = Literal["header", "query", "cookie"]
ItemKind = Literal["text", "number", "select", "object"]


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        # Optional attributes left at None are dropped; required ones keep an explicit null.
        data = handler(self)
        for name, info in type(self).model_fields.items():
            if info.is_required() or getattr(self, name) is not None:
                continue
            data.pop(info.alias or name, None)
            data.pop(name, None)
        return data

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, dropping unset attributes."""
        return self.model_dump(mode="json", by_alias=True)


class Option(_Model):
    """One entry of a select control."""

    value: Any
    label: str


class ShowIf(_Model):
    """Show a field only while another field holds one of the given values."""

    field: str
    value: Any  # scalar or list of accepted values


class _BaseField(_Model):
    name: str
    label: str
    required: bool = False
    param_location: ParamLocation = "body"
    default_value: Any = None
    example_value: Any = None
    help_text: str | None = None
    show_if: ShowIf | None = None


class TextField(_BaseField):
    kind: Literal["text"] = "text"
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    pattern_error: str | None = None


class TextareaField(_BaseField):
    kind: Literal["textarea"] = "textarea"
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    pattern_error: str | None = None


class NumberField(_BaseField):
    kind: Literal["number"] = "number"
    min: int | float | None = None
    max: int | float | None = None
    step: int | None = None  # 1 for integer schemas


class DateField(_BaseField):
    kind: Literal["date"] = "date"
    min: Any = None
    max: Any = None


class SelectField(_BaseField):
    kind: Literal["select"] = "select"
    options: list[Option]


class BooleanSelectField(_BaseField):
    kind: Literal["boolean-select"] = "boolean-select"
    options: list[Option]


class ArrayField(_BaseField):
    kind: Literal["array"] = "array"
    item_kind: ItemKind = "text"
    item_options: list[Option] | None = None  # item_kind == "select"
    item_fields: list["FormField"] | None = None  # item_kind == "object"


FormField = Annotated[
    Union[
        TextField,
        TextareaField,
        NumberField,
        DateField,
        SelectField,
        BooleanSelectField,
        ArrayField,
    ],
    Field(discriminator="kind"),
]

ArrayField.model_rebuild()


class AuthDescriptor(_Model):
    """How an API expects to be authenticated. Never carries the secret."""

    type: Literal["none", "bearer", "apikey"] = "none"
    key_name: str | None = None
    key_location: KeyLocation | None = None


class AuthSecret(_Model):
    """Stored credential values for one API."""

    token: str | None = None
    api_key: str | None = None


class APIDescriptor(_Model):
    """One OpenAPI operation converted into a testable unit."""

    id: str
    name: str
    description: str = ""
    endpoint: str  # absolute URL template, may contain {param} placeholders
    method: str
    tag: str = "Sonstige"
    auth: AuthDescriptor = AuthDescriptor()
    fields: list[FormField] = []
    # Per-API header overrides; None falls back to RequestOptions.
    content_type: str | None = None
    accept: str | None = None


class RequestAssembly(_Model):
    """Transient result of routing form values into request parts."""

    final_endpoint: str
    body_payload: dict[str, Any] = {}
    headers: dict[str, str] = {}

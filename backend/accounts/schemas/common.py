"""Common Marshmallow building blocks shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import RAISE, Schema, fields, validate


def camelcase(name: str) -> str:
    """``first_name`` → ``firstName``."""
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


class CamelCaseSchema(Schema):
    """Snake_case attributes in Python, camelCase keys on the wire.

    Unknown keys are rejected.
    """

    class Meta:
        unknown = RAISE

    def on_bind_field(self, field_name: str, field_obj: fields.Field) -> None:
        field_obj.data_key = camelcase(field_obj.data_key or field_name)


class NormalizedEmail(fields.Email):
    """Email field that trims and lower-cases before validating."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("validate", validate.Length(max=254))
        super().__init__(**kwargs)

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str:
        if isinstance(value, str):
            value = value.strip().lower()
        return super()._deserialize(value, attr, data, **kwargs)


class EmailOnlySchema(CamelCaseSchema):
    """Body carrying a single ``email``."""

    email = NormalizedEmail(required=True)

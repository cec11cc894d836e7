"""Validation rule tokenizer.

Splits a single field's validation expression into atomic constraints and
derives the OpenAPI type, format, enum and required flag from them.
"""

import re
from typing import Any

from pydantic import BaseModel

# First match wins; anything unrecognized is a string.
TYPE_TOKENS = (
    ("integer", "integer"),
    ("numeric", "number"),
    ("boolean", "boolean"),
    ("array", "array"),
)

FORMAT_TOKENS = {
    "date": "date",
    "date_format": "date-time",
    "email": "email",
    "uuid": "uuid",
    "url": "uri",
    "file": "binary",
    "image": "binary",
}

ARRAY_SUFFIX = re.compile(r"^(?P<base>[^.\[]+)(?:\.\*|\[\*?\])")


class Rule(BaseModel):
    """Ordered tokens of one field's validation expression."""

    tokens: list[str] = []

    @property
    def required(self) -> bool:
        return "required" in self.tokens

    @property
    def is_array(self) -> bool:
        return "array" in self.tokens

    @property
    def type(self) -> str:
        for token, openapi_type in TYPE_TOKENS:
            if token in self.tokens:
                return openapi_type
        return "string"

    @property
    def format(self) -> str | None:
        if self.type != "string":
            return None
        for token in self.tokens:
            name = token.split(":", 1)[0]
            if name in FORMAT_TOKENS:
                return FORMAT_TOKENS[name]
        return None

    @property
    def enum(self) -> list[str]:
        for token in self.tokens:
            if token.startswith("in:"):
                return [value.strip().strip("\"'") for value in token[3:].split(",") if value.strip()]
        return []


def split_rules(value: Any) -> list[str]:
    """Normalize a ``a|b:c`` string or a list of rules into a token list."""
    if not value:
        return []
    if isinstance(value, str):
        items = value.split("|")
    else:
        items = [str(item) for item in value]
    return [item.strip() for item in items if item and item.strip()]


def tokenize(value: Any) -> Rule:
    return Rule(tokens=split_rules(value))


def split_field_name(name: str) -> tuple[str, bool]:
    """Return ``(base_key, is_array_element)`` for a rule field name.

    ``tags.*``, ``tags[]``, ``tags[*]`` and ``tags.*.id`` all collapse to the
    ``tags`` base key.
    """
    match = ARRAY_SUFFIX.match(name)
    if match:
        return match.group("base"), True
    return name, False

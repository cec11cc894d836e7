"""Models for the application metadata consumed by the generator.

Route sources and documentation parsers convert their input into these
models for downstream processing.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from openapi_synth.generator.base import Response

OPTIONAL_PLACEHOLDER = re.compile(r"\{(\w+)\?\}")


class Middleware(BaseModel):
    """A route middleware entry, e.g. ``scopes:read,write``."""

    name: str
    parameters: list[str] = []

    @classmethod
    def parse(cls, value: str) -> "Middleware":
        name, _, arguments = value.partition(":")
        parameters = [arg.strip() for arg in arguments.split(",") if arg.strip()]
        return cls(name=name.strip(), parameters=parameters)


class Route(BaseModel):
    """Snapshot of one entry of the application's route table."""

    model_config = ConfigDict(frozen=True)

    original_uri: str  # /users/{user}/posts/{post?}
    methods: list[str]
    name: str | None = None
    action: str | None = None  # handler reference, e.g. app.users:show
    middleware: list[Middleware] = []

    @field_validator("methods")
    @classmethod
    def _lowercase_methods(cls, methods: list[str]) -> list[str]:
        return [method.lower() for method in methods]

    @field_validator("middleware", mode="before")
    @classmethod
    def _parse_middleware(cls, middleware: list[Any]) -> list[Any]:
        return [Middleware.parse(item) if isinstance(item, str) else item for item in middleware or []]

    @property
    def uri(self) -> str:
        """URI with a leading slash and optional parameter markers removed."""
        return "/" + OPTIONAL_PLACEHOLDER.sub(r"{\1}", self.original_uri).lstrip("/")


class ParsedDocBlock(BaseModel):
    """Result of interpreting a handler's documentation comment."""

    summary: str = ""
    description: str = ""
    deprecated: bool = False
    responses: dict[str, Response] = {}
    tags: list[str] | None = None
    extra: dict[str, Any] = {}

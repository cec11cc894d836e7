"""Generator configuration.

Defaults mirror the sample ``config/openapi.yaml`` and read the usual
application environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from openapi_synth.errors import ConfigurationError


class ServerEntry(BaseModel):
    url: str | None = None
    description: str | None = None


class IgnoredOptions(BaseModel):
    methods: list[str] = ["head"]
    routes: list[str] = []


class AppendOptions(BaseModel):
    responses: dict[str, dict[str, Any]] = {}

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_strings(cls, responses: Any) -> Any:
        if isinstance(responses, dict):
            return {str(code): response for code, response in responses.items()}
        return responses


class ParseOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doc_block: bool = Field(True, alias="docBlock")
    security: bool = True


class SwaggerConfig(BaseModel):
    """Options recognized by the document generator."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default_factory=lambda: os.getenv("APP_NAME", "Application API Documentation"))
    description: str = Field(
        default_factory=lambda: os.getenv("APP_DESCRIPTION", "Documentation for the Application API")
    )
    version: str = Field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    host: str | None = Field(default_factory=lambda: os.getenv("APP_URL"))
    secure: bool = False
    servers: list[str | ServerEntry] = []
    tags: list[dict[str, Any]] = []
    ignored: IgnoredOptions = Field(default_factory=IgnoredOptions)
    append: AppendOptions = Field(default_factory=AppendOptions)
    parse: ParseOptions = Field(default_factory=ParseOptions)
    authentication_flow: dict[str, str] = {"OAuth2": "authorizationCode"}

    # Fallback server when none are configured
    app_name: str = Field(default_factory=lambda: os.getenv("APP_NAME", "Application"))
    app_url: str = Field(default_factory=lambda: os.getenv("APP_URL", "http://localhost"))


def load_config(path: Path | None = None) -> SwaggerConfig:
    """Load configuration from a YAML file. Without a path, defaults apply."""
    if path is None:
        return SwaggerConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    try:
        return SwaggerConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

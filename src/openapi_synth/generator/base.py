"""Typed models for the generated OpenAPI 3.0 document.

Field names follow Python conventions; aliases carry the OpenAPI spelling and
are used when the document is dumped.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _OpenApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Items(_OpenApiModel):
    """Element type of an array-typed parameter."""

    param_type: str = Field("string", alias="type")
    format: str | None = None


class Parameter(_OpenApiModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str = Field(alias="in")  # query / path / header / cookie
    description: str = ""
    param_type: str = Field("string", alias="type")
    format: str | None = None
    required: bool = False
    enum: list[str] | None = None
    items: Items | None = None


class Schema(_OpenApiModel):
    """JSON schema fragment used for request bodies."""

    schema_type: str = Field("object", alias="type")
    format: str | None = None
    enum: list[str] | None = None
    required: list[str] | None = None
    properties: dict[str, Schema] | None = None
    items: Schema | None = None


class MediaType(_OpenApiModel):
    body_schema: Schema = Field(alias="schema")


class RequestBody(_OpenApiModel):
    content: dict[str, MediaType]


class Response(_OpenApiModel):
    """Response object. Extra keys from append-overrides are kept as given."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    description: str = ""


class Operation(_OpenApiModel):
    """One (path, method) endpoint.

    Extra keys come from the ``Request`` documentation tag and are dumped
    alongside the typed fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    summary: str = ""
    description: str = ""
    deprecated: bool = False
    tags: list[str] | None = None
    responses: dict[str, Response] = {}
    parameters: list[Parameter] | None = None
    request_body: RequestBody | None = Field(None, alias="requestBody")
    security: list[dict[str, list[str]]] | None = None


class OAuthFlow(_OpenApiModel):
    authorization_url: str | None = Field(None, alias="authorizationUrl")
    token_url: str | None = Field(None, alias="tokenUrl")
    scopes: dict[str, str] = {}


class SecurityScheme(_OpenApiModel):
    """Security scheme, either ``oauth2`` with flows or ``http`` bearer."""

    scheme_type: str = Field(alias="type")
    flows: dict[str, OAuthFlow] | None = None
    scheme: str | None = None
    bearer_format: str | None = Field(None, alias="bearerFormat")


class Components(_OpenApiModel):
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict, alias="securitySchemes")


class Info(_OpenApiModel):
    title: str
    description: str = ""
    version: str


class Server(_OpenApiModel):
    url: str
    description: str = ""


class Document(_OpenApiModel):
    """Root OpenAPI object."""

    openapi: str = "3.0.0"
    info: Info
    servers: list[Server] = []
    paths: dict[str, dict[str, Operation]] = {}
    tags: list[dict[str, Any]] = []
    components: Components | None = None

    def to_dict(self) -> dict[str, Any]:
        """Dump the document with OpenAPI key names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

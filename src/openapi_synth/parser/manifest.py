"""Route manifest parser.

A route manifest is a YAML or JSON snapshot of an application's route table
together with the metadata the generator needs::

    middleware:
      scopes: Laravel\\Passport\\Http\\Middleware\\CheckScopes
    scopes:
      - id: users.read
        description: Read users
    handlers:
      app.users:index:
        doc: List users
        rules:
          status: required|in:active,inactive
    routes:
      - uri: /users
        methods: [GET, HEAD]
        name: users.index
        action: app.users:index
        middleware: ["auth:api", "scopes:users.read"]
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from openapi_synth.errors import ConfigurationError
from .base import Route


class HandlerMetadata(BaseModel):
    doc: str = ""
    rules: dict[str, Any] = {}


class RouteManifest:
    """In-memory route table that also answers metadata and scope lookups."""

    def __init__(
        self,
        routes: list[Route],
        handlers: dict[str, HandlerMetadata] | None = None,
        middleware: dict[str, str] | None = None,
        scopes: list[dict[str, str]] | None = None,
    ):
        self.routes = routes
        self.handlers = handlers or {}
        self.middleware = middleware or {}
        self._scopes = scopes or []

    def list_routes(self) -> list[Route]:
        return list(self.routes)

    def doc_comment_for(self, route: Route) -> str | None:
        handler = self.handlers.get(route.action or "")
        return handler.doc if handler else None

    def validation_rules_for(self, route: Route) -> dict[str, Any]:
        handler = self.handlers.get(route.action or "")
        return dict(handler.rules) if handler else {}

    def resolve(self, name: str) -> str | None:
        return self.middleware.get(name)

    def scopes(self) -> list[dict[str, str]]:
        return list(self._scopes)


def load_manifest(file_path: Path) -> RouteManifest:
    """Parse a route manifest file into a RouteManifest."""
    text = file_path.read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid route manifest {file_path}: {e}") from e
    if not isinstance(doc, dict):
        raise ConfigurationError(f"Route manifest {file_path} must contain a mapping")

    try:
        return parse_manifest(doc)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid route manifest {file_path}: {e}") from e


def parse_manifest(doc: dict[str, Any]) -> RouteManifest:
    handlers = {
        action: HandlerMetadata(**(data or {}))
        for action, data in (doc.get("handlers") or {}).items()
    }

    routes = []
    for index, item in enumerate(doc.get("routes") or []):
        route = _parse_route(item)
        if "doc" in item or "rules" in item:
            if not route.action:
                raise ConfigurationError(f"Route #{index + 1} ({route.uri}) declares metadata without an action")
            handler = handlers.setdefault(route.action, HandlerMetadata())
            if "doc" in item:
                handler.doc = item["doc"] or ""
            if "rules" in item:
                handler.rules = item["rules"] or {}
        routes.append(route)

    return RouteManifest(
        routes=routes,
        handlers=handlers,
        middleware={str(name): str(cls) for name, cls in (doc.get("middleware") or {}).items()},
        scopes=[_parse_scope(scope) for scope in doc.get("scopes") or []],
    )


def _parse_route(item: dict[str, Any]) -> Route:
    if not isinstance(item, dict) or "uri" not in item:
        raise ConfigurationError(f"Route entry {item!r} has no uri")
    return Route(
        original_uri=item["uri"],
        methods=item.get("methods", ["GET"]),
        name=item.get("name"),
        action=item.get("action"),
        middleware=item.get("middleware", []),
    )


def _parse_scope(scope: dict[str, Any]) -> dict[str, str]:
    if not isinstance(scope, dict) or "id" not in scope:
        raise ConfigurationError(f"Scope entry {scope!r} has no id")
    return {"id": str(scope["id"]), "description": str(scope.get("description", ""))}

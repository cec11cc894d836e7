"""Security definition builder.

Derives ``components.securitySchemes`` from the configured authentication
flows and per-route ``security`` requirements from scope-checking middleware.
"""

import logging
from typing import Any, Iterable, Protocol

from openapi_synth.config import SwaggerConfig
from openapi_synth.errors import InvalidAuthenticationFlowError, InvalidDefinitionError
from openapi_synth.generator.base import OAuthFlow, SecurityScheme
from openapi_synth.parser.base import Route

logger = logging.getLogger(__name__)

OAUTH_TOKEN_PATH = "/oauth/token"
OAUTH_AUTHORIZE_PATH = "/oauth/authorize"

ALLOWED_FLOWS: dict[str, list[str]] = {
    "OAuth2": ["password", "application", "implicit", "authorizationCode"],
    "bearerAuth": ["http"],
}

AUTHORIZATION_URL_FLOWS = ("implicit", "authorizationCode")
TOKEN_URL_FLOWS = ("password", "application", "authorizationCode")

SCOPE_MIDDLEWARE_CLASSES = frozenset({
    "Laravel\\Passport\\Http\\Middleware\\CheckScopes",
    "Laravel\\Passport\\Http\\Middleware\\CheckForAnyScope",
})


class ScopeProvider(Protocol):
    def scopes(self) -> list[dict[str, str]]: ...


class MiddlewareResolver(Protocol):
    def resolve(self, name: str) -> str | None: ...


def has_oauth_routes(routes: Iterable[Route]) -> bool:
    return any(route.uri in (OAUTH_TOKEN_PATH, OAUTH_AUTHORIZE_PATH) for route in routes)


def validate_authentication_flow(definition: str, flow: str) -> None:
    """Raise a configuration error for an unknown definition or illegal flow."""
    if definition not in ALLOWED_FLOWS:
        raise InvalidDefinitionError(f"Invalid definition {definition!r}", allowed=list(ALLOWED_FLOWS))
    allowed = ALLOWED_FLOWS[definition]
    if flow not in allowed:
        raise InvalidAuthenticationFlowError(
            f"Invalid authentication flow {flow!r} for {definition}", allowed=allowed
        )


class SecurityDefinitionBuilder:
    """Builds security schemes and route requirements for one generation run."""

    def __init__(
        self,
        config: SwaggerConfig,
        scope_provider: ScopeProvider | None = None,
        middleware_resolver: MiddlewareResolver | None = None,
    ):
        self.config = config
        self.scope_provider = scope_provider
        self.middleware_resolver = middleware_resolver

    def generate_security_definitions(self) -> dict[str, SecurityScheme]:
        """Validate every configured flow, then build the schemes."""
        flows = self.config.authentication_flow
        for definition, flow in flows.items():
            validate_authentication_flow(definition, flow)
        return {
            definition: self.create_security_definition(definition, flow)
            for definition, flow in flows.items()
        }

    def create_security_definition(self, definition: str, flow: str) -> SecurityScheme:
        if definition == "OAuth2":
            oauth_flow = OAuthFlow(scopes=self.generate_oauth_scopes())
            if flow in AUTHORIZATION_URL_FLOWS:
                oauth_flow.authorization_url = self.get_endpoint(OAUTH_AUTHORIZE_PATH)
            if flow in TOKEN_URL_FLOWS:
                oauth_flow.token_url = self.get_endpoint(OAUTH_TOKEN_PATH)
            return SecurityScheme(scheme_type="oauth2", flows={flow: oauth_flow})
        return SecurityScheme(scheme_type=flow, scheme="bearer", bearer_format="JWT")

    def get_endpoint(self, path: str) -> str:
        host = self.config.host or ""
        if not host.startswith(("http://", "https://")):
            host = ("https://" if self.config.secure else "http://") + host
        return host.rstrip("/") + path

    def generate_oauth_scopes(self) -> dict[str, str]:
        if self.scope_provider is None:
            return {}
        return {scope["id"]: scope.get("description", "") for scope in self.scope_provider.scopes()}

    def is_scope_middleware(self, name: str) -> bool:
        if self.middleware_resolver is None:
            return False
        return self.middleware_resolver.resolve(name) in SCOPE_MIDDLEWARE_CLASSES

    def route_security(self, route: Route) -> list[dict[str, list[str]]] | None:
        """Security requirement for a route, or None when it checks no scopes."""
        scopes: list[str] = []
        for middleware in route.middleware:
            if not self.is_scope_middleware(middleware.name):
                continue
            scopes.extend(scope for scope in middleware.parameters if scope not in scopes)

        requirement: dict[str, Any] = {
            definition: list(scopes) if definition == "OAuth2" else []
            for definition in self.config.authentication_flow
        }
        if not scopes and not any(requirement.values()):
            return None
        logger.debug("Route %s requires scopes %s", route.uri, scopes)
        return [requirement]

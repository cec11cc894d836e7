"""Document assembler: walks the route table and builds the OpenAPI document."""

import logging
import re
from typing import Any, Protocol

from openapi_synth.config import ServerEntry, SwaggerConfig
from openapi_synth.errors import MetadataResolutionError
from openapi_synth.generator.base import Components, Document, Info, Operation, Response, Server
from openapi_synth.generator.parameters import (
    ParameterPlacement,
    PathParametersGenerator,
    get_parameters_generator,
)
from openapi_synth.generator.security import (
    MiddlewareResolver,
    ScopeProvider,
    SecurityDefinitionBuilder,
    has_oauth_routes,
)
from openapi_synth.parser.base import ParsedDocBlock, Route
from openapi_synth.parser.docblock import parse_doc_block

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.0"


class MetadataResolver(Protocol):
    def doc_comment_for(self, route: Route) -> str | None: ...

    def validation_rules_for(self, route: Route) -> dict[str, Any]: ...


class Generator:
    """Builds an OpenAPI document from a route table and its handler metadata."""

    def __init__(
        self,
        config: SwaggerConfig,
        routes: list[Route],
        resolver: MetadataResolver,
        route_filter: str | None = None,
        scope_provider: ScopeProvider | None = None,
        middleware_resolver: MiddlewareResolver | None = None,
    ):
        self.config = config
        self.routes = list(routes)
        self.resolver = resolver
        self.route_filter = route_filter
        self.security = SecurityDefinitionBuilder(config, scope_provider, middleware_resolver)
        self.has_security_definitions = False

    def generate(self) -> Document:
        """Generate the document. Configuration errors propagate to the caller."""
        document = self.generate_base_information()
        self.has_security_definitions = False

        if self.config.parse.security and has_oauth_routes(self.routes):
            schemes = self.security.generate_security_definitions()
            if schemes:
                document.components = Components(security_schemes=schemes)
                self.has_security_definitions = True

        ignored_methods = {method.lower() for method in self.config.ignored.methods}
        operations = 0
        for route in self.routes:
            if self.is_filtered_route(route):
                logger.debug("Skipping route %s", route.uri)
                continue
            path_item = document.paths.setdefault(route.uri, {})
            for method in route.methods:
                if method in ignored_methods:
                    continue
                path_item[method] = self.generate_path(route, method)
                operations += 1

        logger.info("Documented %d operations across %d paths", operations, len(document.paths))
        return document

    def generate_base_information(self) -> Document:
        return Document(
            openapi=OPENAPI_VERSION,
            info=Info(
                title=self.config.title,
                description=self.config.description,
                version=self.config.version,
            ),
            servers=self.generate_servers_list(),
            paths={},
            tags=list(self.config.tags),
        )

    def generate_servers_list(self) -> list[Server]:
        servers = []
        for index, entry in enumerate(self.config.servers, start=1):
            default_description = f"{self.config.title} Server #{index}"
            if isinstance(entry, ServerEntry):
                if entry.url:
                    servers.append(Server(url=entry.url, description=entry.description or default_description))
            else:
                servers.append(Server(url=entry, description=default_description))

        if not servers:
            servers.append(Server(url=self.config.app_url, description=f"{self.config.app_name} Main Server"))
        return servers

    def is_filtered_route(self, route: Route) -> bool:
        ignored_routes = self.config.ignored.routes
        if route.name and route.name in ignored_routes:
            return True
        if route.uri in ignored_routes or route.original_uri in ignored_routes:
            return True
        if self.route_filter:
            prefix = "/" + self.route_filter.lstrip("/")
            return not re.match(re.escape(prefix), route.uri)
        return False

    def generate_path(self, route: Route, method: str) -> Operation:
        documentation = parse_doc_block(self._doc_comment(route), self.config.parse.doc_block)

        responses = dict(documentation.responses)
        if not responses:
            responses["200"] = Response(description="OK")
        for code, response in self.config.append.responses.items():
            responses.setdefault(str(code), Response(**response))

        operation = self._create_operation(documentation, responses)
        self.add_action_parameters(operation, route, method)

        if self.has_security_definitions:
            security = self.security.route_security(route)
            if security:
                operation.security = security
        return operation

    def add_action_parameters(self, operation: Operation, route: Route, method: str) -> None:
        rules = self._validation_rules(route)
        parameters = PathParametersGenerator(route.original_uri).get_parameters()

        if rules:
            generator = get_parameters_generator(rules, method)
            if generator.get_parameter_location() is ParameterPlacement.BODY:
                operation.request_body = generator.get_parameters()
            else:
                parameters.extend(generator.get_parameters())

        if parameters:
            operation.parameters = parameters

    @staticmethod
    def _create_operation(documentation: ParsedDocBlock, responses: dict[str, Response]) -> Operation:
        return Operation(
            summary=documentation.summary,
            description=documentation.description,
            deprecated=documentation.deprecated,
            responses=responses,
            tags=documentation.tags,
            **documentation.extra,
        )

    def _doc_comment(self, route: Route) -> str:
        try:
            return self.resolver.doc_comment_for(route) or ""
        except MetadataResolutionError as e:
            logger.warning("Could not read documentation for %s: %s", route.uri, e)
            return ""

    def _validation_rules(self, route: Route) -> dict[str, Any]:
        try:
            return self.resolver.validation_rules_for(route) or {}
        except MetadataResolutionError as e:
            logger.warning("Could not read validation rules for %s: %s", route.uri, e)
            return {}

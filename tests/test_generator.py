from pathlib import Path

import pytest

from conftest import StubResolver, make_route
from openapi_synth.config import AppendOptions, IgnoredOptions, ServerEntry
from openapi_synth.errors import InvalidAuthenticationFlowError, MetadataResolutionError
from openapi_synth.generator.document import Generator
from openapi_synth.resolver import ImportResolver

FIXTURES = Path(__file__).parent / "fixtures"
CHECK_SCOPES = "Laravel\\Passport\\Http\\Middleware\\CheckScopes"


class MiddlewareMap:
    def resolve(self, name):
        return {"scopes": CHECK_SCOPES}.get(name)


class FailingResolver:
    def doc_comment_for(self, route):
        raise MetadataResolutionError("handler not importable")

    def validation_rules_for(self, route):
        raise MetadataResolutionError("handler not importable")


def _generate(config, routes, resolver=None, **kwargs):
    generator = Generator(config, routes, resolver or StubResolver(), **kwargs)
    return generator.generate().to_dict()


class TestBaseInformation:
    def test_skeleton(self, config):
        doc = _generate(config, [])
        assert doc["openapi"] == "3.0.0"
        assert doc["info"] == {"title": "Test API", "description": "Test", "version": "1.0.0"}
        assert doc["paths"] == {}
        assert doc["tags"] == []
        assert "components" not in doc

    def test_servers_from_config(self, config):
        config.servers = [
            "https://api.example.com",
            ServerEntry(url="https://staging.example.com"),
            ServerEntry(url="https://dev.example.com", description="Development"),
            ServerEntry(description="No url"),
        ]
        assert _generate(config, [])["servers"] == [
            {"url": "https://api.example.com", "description": "Test API Server #1"},
            {"url": "https://staging.example.com", "description": "Test API Server #2"},
            {"url": "https://dev.example.com", "description": "Development"},
        ]

    def test_fallback_server(self, config):
        assert _generate(config, [])["servers"] == [
            {"url": "http://localhost", "description": "Test Main Server"},
        ]


class TestRouteSelection:
    def test_every_method_documented_except_ignored(self, config):
        doc = _generate(config, [make_route("/users", ["GET", "HEAD", "POST"])])
        assert set(doc["paths"]["/users"]) == {"get", "post"}

    def test_ignored_by_name(self, config):
        config.ignored = IgnoredOptions(routes=["users.index"])
        doc = _generate(config, [make_route("/users", name="users.index"), make_route("/posts")])
        assert "/users" not in doc["paths"]
        assert "/posts" in doc["paths"]

    def test_ignored_by_uri(self, config):
        config.ignored = IgnoredOptions(methods=[], routes=["/_ignition/health-check"])
        doc = _generate(config, [make_route("_ignition/health-check", ["GET", "POST"])])
        assert doc["paths"] == {}

    def test_route_prefix_filter(self, config):
        routes = [make_route("/v1/items"), make_route("/v2/items")]
        doc = _generate(config, routes, route_filter="/v1")
        assert list(doc["paths"]) == ["/v1/items"]

    def test_route_prefix_is_literal(self, config):
        routes = [make_route("/v1.0/items"), make_route("/v1x0/items")]
        doc = _generate(config, routes, route_filter="/v1.0")
        assert list(doc["paths"]) == ["/v1.0/items"]

    def test_duplicate_route_last_wins(self, config):
        resolver = StubResolver(docs={"first": "First", "second": "Second"})
        routes = [make_route("/users", action="first"), make_route("/users", action="second")]
        doc = _generate(config, routes, resolver)
        assert doc["paths"]["/users"]["get"]["summary"] == "Second"

    def test_optional_placeholder_normalized(self, config):
        doc = _generate(config, [make_route("posts/{post?}")])
        operation = doc["paths"]["/posts/{post}"]["get"]
        assert operation["parameters"][0]["name"] == "post"


class TestOperation:
    def test_default_response(self, config):
        operation = _generate(config, [make_route("/users")])["paths"]["/users"]["get"]
        assert operation["responses"] == {"200": {"description": "OK"}}
        assert operation["summary"] == ""
        assert operation["deprecated"] is False
        assert "parameters" not in operation

    def test_append_fills_missing_codes_only(self, config):
        config.append = AppendOptions(responses={
            "401": {"description": "Unauthorized"},
            "404": {"description": "Appended"},
        })
        resolver = StubResolver(docs={
            "show": "Show\n@Response({\n  code: 404\n  description: Not found\n})",
        })
        doc = _generate(config, [make_route("/users", action="show"), make_route("/posts")], resolver)
        users = doc["paths"]["/users"]["get"]["responses"]
        assert users == {"404": {"description": "Not found"}, "401": {"description": "Unauthorized"}}
        posts = doc["paths"]["/posts"]["get"]["responses"]
        assert posts == {
            "200": {"description": "OK"},
            "401": {"description": "Unauthorized"},
            "404": {"description": "Appended"},
        }

    def test_doc_block_metadata(self, config):
        resolver = StubResolver(docs={
            "index": "List users\n\nAll of them.\n@Request({\n  tags: Users\n  operationId: listUsers\n})\n@deprecated",
        })
        operation = _generate(config, [make_route("/users", action="index")], resolver)["paths"]["/users"]["get"]
        assert operation["summary"] == "List users"
        assert operation["description"] == "All of them."
        assert operation["deprecated"] is True
        assert operation["tags"] == ["Users"]
        assert operation["operationId"] == "listUsers"

    def test_doc_block_parsing_disabled(self, config):
        config.parse.doc_block = False
        resolver = StubResolver(docs={"index": "List users"})
        operation = _generate(config, [make_route("/users", action="index")], resolver)["paths"]["/users"]["get"]
        assert operation["summary"] == ""

    def test_query_parameters_for_get(self, config):
        resolver = StubResolver(rules={"index": {"status": "required|in:active,inactive"}})
        operation = _generate(config, [make_route("/users", action="index")], resolver)["paths"]["/users"]["get"]
        assert operation["parameters"] == [{
            "name": "status",
            "in": "query",
            "description": "",
            "type": "string",
            "required": True,
            "enum": ["active", "inactive"],
        }]
        assert "requestBody" not in operation

    def test_array_rule_yields_single_parameter(self, config):
        resolver = StubResolver(rules={"index": {"tags.*": "string"}})
        operation = _generate(config, [make_route("/users", action="index")], resolver)["paths"]["/users"]["get"]
        assert [p["name"] for p in operation["parameters"]] == ["tags"]
        assert operation["parameters"][0]["type"] == "array"
        assert operation["parameters"][0]["items"]["type"] == "string"

    def test_request_body_for_post(self, config):
        resolver = StubResolver(rules={"store": {"status": "required|in:active,inactive"}})
        operation = _generate(config, [make_route("/users", ["POST"], action="store")], resolver)["paths"]["/users"]["post"]
        assert "parameters" not in operation
        schema = operation["requestBody"]["content"]["application/json"]["schema"]
        assert schema["properties"]["status"]["enum"] == ["active", "inactive"]
        assert schema["required"] == ["status"]

    def test_path_parameters_kept_beside_request_body(self, config):
        resolver = StubResolver(rules={"update": {"name": "string"}})
        route = make_route("/users/{user}", ["PUT"], action="update")
        operation = _generate(config, [route], resolver)["paths"]["/users/{user}"]["put"]
        assert [p["name"] for p in operation["parameters"]] == ["user"]
        assert "requestBody" in operation

    def test_path_parameters_come_first(self, config):
        resolver = StubResolver(rules={"show": {"include": "string"}})
        route = make_route("/users/{user}", action="show")
        operation = _generate(config, [route], resolver)["paths"]["/users/{user}"]["get"]
        assert [(p["name"], p["in"]) for p in operation["parameters"]] == [("user", "path"), ("include", "query")]

    def test_resolution_failure_degrades_to_defaults(self, config):
        doc = _generate(config, [make_route("/users/{user}")], FailingResolver())
        operation = doc["paths"]["/users/{user}"]["get"]
        assert operation["responses"] == {"200": {"description": "OK"}}
        assert operation["parameters"][0]["in"] == "path"

    def test_malformed_doc_block_does_not_block_other_routes(self, config):
        resolver = StubResolver(docs={"bad": "Bad\n@Response({\n  nonsense\n})", "good": "Good"})
        doc = _generate(config, [make_route("/bad", action="bad"), make_route("/good", action="good")], resolver)
        assert doc["paths"]["/bad"]["get"]["summary"] == ""
        assert doc["paths"]["/good"]["get"]["summary"] == "Good"


class TestSecurity:
    def _routes(self):
        return [
            make_route("oauth/token", ["POST"]),
            make_route("/users", middleware=["scopes:users.read"]),
            make_route("/public"),
        ]

    def test_security_schemes_and_requirements(self, config):
        doc = _generate(config, self._routes(), middleware_resolver=MiddlewareMap())
        assert doc["components"]["securitySchemes"]["OAuth2"]["type"] == "oauth2"
        assert doc["paths"]["/users"]["get"]["security"] == [{"OAuth2": ["users.read"]}]
        assert "security" not in doc["paths"]["/public"]["get"]

    def test_no_oauth_routes_means_no_security(self, config):
        routes = [make_route("/users", middleware=["scopes:users.read"])]
        doc = _generate(config, routes, middleware_resolver=MiddlewareMap())
        assert "components" not in doc
        assert "security" not in doc["paths"]["/users"]["get"]

    def test_security_parsing_disabled(self, config):
        config.parse.security = False
        doc = _generate(config, self._routes(), middleware_resolver=MiddlewareMap())
        assert "components" not in doc
        assert "security" not in doc["paths"]["/users"]["get"]

    def test_no_configured_flows_means_no_components(self, config):
        config.authentication_flow = {}
        doc = _generate(config, self._routes(), middleware_resolver=MiddlewareMap())
        assert "components" not in doc
        assert "security" not in doc["paths"]["/users"]["get"]

    def test_invalid_flow_fails_before_routes(self, config):
        config.authentication_flow = {"OAuth2": "clientCredentials"}
        resolver = StubResolver()
        resolver.doc_comment_for = pytest.fail
        with pytest.raises(InvalidAuthenticationFlowError):
            Generator(config, self._routes(), resolver).generate()


class TestIdempotence:
    def test_two_runs_produce_identical_documents(self, config):
        config.servers = ["https://a.example.com", "https://b.example.com"]
        resolver = StubResolver(
            docs={"index": "List\n@Response({\n  code: 200\n  description: Users\n})"},
            rules={"index": {"status": "in:a,b", "tags.*": "integer"}},
        )
        routes = [make_route("oauth/token", ["POST"]), make_route("/users", action="index", middleware=["scopes:x"])]
        generator = Generator(config, routes, resolver, middleware_resolver=MiddlewareMap())
        assert generator.generate().to_dict() == generator.generate().to_dict()


class TestImportedHandlers:
    @pytest.fixture
    def resolver(self, monkeypatch):
        monkeypatch.syspath_prepend(str(FIXTURES))
        return ImportResolver()

    def test_failing_handlers_degrade_per_route(self, config, resolver):
        routes = [
            make_route("/orders/{order}", ["PUT"], action="sample_handlers:update_order"),
            make_route("/orders/import", ["POST"], action="sample_handlers:import_orders"),
            make_route("/orders/export", action="sample_handlers:export_orders"),
            make_route("/broken", action="broken_handlers:handler"),
            make_route("/orders", ["POST"], action="sample_handlers:store_order"),
        ]
        paths = _generate(config, routes, resolver)["paths"]

        update = paths["/orders/{order}"]["put"]
        assert update["summary"] == "Update an order"
        assert "requestBody" not in update
        assert [p["name"] for p in update["parameters"]] == ["order"]

        assert "requestBody" not in paths["/orders/import"]["post"]
        assert "parameters" not in paths["/orders/export"]["get"]

        broken = paths["/broken"]["get"]
        assert broken["summary"] == ""
        assert broken["responses"] == {"200": {"description": "OK"}}

        store = paths["/orders"]["post"]
        assert store["summary"] == "Create an order"
        assert store["requestBody"]["content"]["application/json"]["schema"]["required"] == ["sku", "quantity"]

    def test_failures_are_logged(self, config, resolver, caplog):
        routes = [make_route("/broken", action="broken_handlers:handler")]
        with caplog.at_level("WARNING", logger="openapi_synth"):
            _generate(config, routes, resolver)
        assert "Could not read documentation for /broken" in caplog.text
        assert "Could not read validation rules for /broken" in caplog.text

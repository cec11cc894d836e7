import logging

import pytest

from openapi_synth.config import SwaggerConfig
from openapi_synth.parser.base import Route


class StubResolver:
    """Metadata resolver backed by plain dicts keyed by route action."""

    def __init__(self, docs=None, rules=None):
        self.docs = docs or {}
        self.rules = rules or {}

    def doc_comment_for(self, route):
        return self.docs.get(route.action)

    def validation_rules_for(self, route):
        return self.rules.get(route.action, {})


def make_route(uri, methods=("GET",), name=None, action=None, middleware=()):
    return Route(
        original_uri=uri,
        methods=list(methods),
        name=name,
        action=action,
        middleware=list(middleware),
    )


@pytest.fixture
def config():
    return SwaggerConfig(
        title="Test API",
        description="Test",
        version="1.0.0",
        host="api.example.com",
        app_name="Test",
        app_url="http://localhost",
    )


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("openapi_synth")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

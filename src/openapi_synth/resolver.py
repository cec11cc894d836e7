"""Handler metadata resolution by import.

Resolves ``package.module:attribute.path`` handler references and reads the
docstring and validation rules of the target callable.
"""

import importlib
import inspect
import logging
from collections.abc import Mapping
from typing import Any

from openapi_synth.errors import MetadataResolutionError
from openapi_synth.parser.base import Route

logger = logging.getLogger(__name__)


class ImportResolver:
    """Reads handler metadata by importing the handler.

    Validation rules come from a ``rules`` attribute on the handler (a mapping
    or a callable returning one) or from the ``rules()`` method of a request
    class used as a parameter annotation.

    A reference that names no importable object resolves to nothing. Errors
    raised by the handler's own code surface as ``MetadataResolutionError``.
    """

    def __init__(self):
        self._cache: dict[str, Any] = {}

    def resolve_handler(self, reference: str | None) -> Any:
        """Return the handler object, or None when it cannot be resolved."""
        if not reference:
            return None
        if reference not in self._cache:
            self._cache[reference] = self._import(reference)
        handler = self._cache[reference]
        if isinstance(handler, Exception):
            raise MetadataResolutionError(f"Importing {reference} failed: {handler}") from handler
        return handler

    @staticmethod
    def _import(reference: str) -> Any:
        module_name, _, attribute_path = reference.partition(":")
        if not module_name or not attribute_path:
            return None
        try:
            handler = importlib.import_module(module_name)
            for attribute in attribute_path.split("."):
                handler = getattr(handler, attribute)
        except (ImportError, AttributeError) as e:
            logger.debug("Cannot resolve handler %s: %s", reference, e)
            return None
        except Exception as e:
            return e
        return handler

    def doc_comment_for(self, route: Route) -> str | None:
        handler = self.resolve_handler(route.action)
        if handler is None:
            return None
        return inspect.getdoc(handler)

    def validation_rules_for(self, route: Route) -> dict[str, Any]:
        handler = self.resolve_handler(route.action)
        if handler is None:
            return {}
        try:
            rules = self._read_rules(handler)
        except Exception as e:
            raise MetadataResolutionError(f"Reading rules of {route.action} failed: {e}") from e
        if not isinstance(rules, Mapping):
            raise MetadataResolutionError(
                f"Rules of {route.action} must be a mapping, got {type(rules).__name__}"
            )
        return dict(rules)

    @staticmethod
    def _read_rules(handler: Any) -> Any:
        rules = getattr(handler, "rules", None)
        if rules is not None:
            return rules() if callable(rules) else rules

        try:
            signature = inspect.signature(handler, eval_str=True)
        except (TypeError, ValueError, NameError):
            return {}
        for parameter in signature.parameters.values():
            annotation = parameter.annotation
            if inspect.isclass(annotation) and callable(getattr(annotation, "rules", None)):
                return annotation().rules()
        return {}

"""Parameter generators.

Convert a route's validation rules (and its URI template) into OpenAPI
parameter and request body objects.
"""

import enum
import re
from abc import ABC, abstractmethod
from typing import Any

from openapi_synth.generator.base import Items, MediaType, Parameter, RequestBody, Schema
from openapi_synth.parser.rules import Rule, split_field_name, tokenize

PATH_PLACEHOLDER = re.compile(r"\{(\w+)\??\}")


class ParameterPlacement(enum.Enum):
    QUERY = "query"
    BODY = "body"


class ParametersGenerator(ABC):
    """Common contract of the rule-based generators."""

    location: ParameterPlacement

    def __init__(self, rules: dict[str, Any]):
        self.rules = rules

    @abstractmethod
    def get_parameters(self) -> list[Parameter] | RequestBody | None:
        """Build the OpenAPI objects for the rule set."""

    def get_parameter_location(self) -> ParameterPlacement:
        return self.location


class QueryParametersGenerator(ParametersGenerator):
    """Emits one ``query`` parameter per field, collapsing array elements."""

    location = ParameterPlacement.QUERY

    def get_parameters(self) -> list[Parameter]:
        parameters: dict[str, Parameter] = {}
        array_types: dict[str, Rule] = {}

        for field, value in self.rules.items():
            rule = tokenize(value)
            key, is_element = split_field_name(field)
            if is_element:
                array_types[key] = rule
                continue

            parameter = Parameter(
                name=field,
                location=self.location.value,
                param_type="array" if rule.is_array else rule.type,
                format=None if rule.is_array else rule.format,
                required=rule.required,
                enum=rule.enum or None,
            )
            if rule.is_array:
                parameter.items = Items()
            parameters[field] = parameter

        for key, rule in array_types.items():
            items = Items(param_type=rule.type, format=rule.format)
            if key in parameters:
                parameters[key].param_type = "array"
                parameters[key].format = None
                parameters[key].enum = None
                parameters[key].items = items
            else:
                parameters[key] = Parameter(
                    name=key,
                    location=self.location.value,
                    param_type="array",
                    required=False,
                    items=items,
                )
        return list(parameters.values())


class BodyParametersGenerator(ParametersGenerator):
    """Emits an ``application/json`` request body, nesting dotted field names."""

    location = ParameterPlacement.BODY

    def get_parameters(self) -> RequestBody | None:
        if not self.rules:
            return None
        root = Schema(schema_type="object", properties={})
        for field, value in self.rules.items():
            tokens = field.replace("[*]", ".*").replace("[]", ".*").split(".")
            self._add_to_schema(root, tokens, tokenize(value))
        return RequestBody(content={"application/json": MediaType(body_schema=root)})

    def _add_to_schema(self, parent: Schema, tokens: list[str], rule: Rule) -> None:
        name, rest = tokens[0], tokens[1:]
        if rest:
            node_type = "array" if rest[0] == "*" else "object"
        else:
            node_type = "array" if rule.is_array else rule.type

        if name == "*":
            node = parent.items
            if node is None:
                node = parent.items = Schema(schema_type=node_type)
        else:
            if parent.properties is None:
                parent.properties = {}
            node = parent.properties.setdefault(name, Schema(schema_type=node_type))
            if not rest and rule.required and name not in (parent.required or []):
                parent.required = [*(parent.required or []), name]

        # A scalar rule never collapses a container built from nested fields.
        if not rest and (node.properties or node.items) and node_type not in ("array", "object"):
            node_type = node.schema_type
        self._apply_type(node, node_type)
        if rest:
            self._add_to_schema(node, rest, rule)
            return

        node.format = rule.format
        node.enum = rule.enum or None
        if node_type == "array" and node.items is None:
            node.items = Schema(schema_type="string")

    @staticmethod
    def _apply_type(node: Schema, schema_type: str) -> None:
        node.schema_type = schema_type
        if schema_type == "object":
            node.items = None
            if node.properties is None:
                node.properties = {}
        elif schema_type == "array":
            node.properties = None
        else:
            node.items = None
            node.properties = None


class PathParametersGenerator:
    """Emits one required ``path`` parameter per URI placeholder."""

    def __init__(self, uri: str):
        self.uri = uri

    def get_parameters(self) -> list[Parameter]:
        return [
            Parameter(name=name, location="path", param_type="string", required=True)
            for name in PATH_PLACEHOLDER.findall(self.uri)
        ]


GENERATORS_BY_METHOD: dict[str, type[ParametersGenerator]] = {
    "post": BodyParametersGenerator,
    "put": BodyParametersGenerator,
    "patch": BodyParametersGenerator,
}


def get_parameters_generator(rules: dict[str, Any], method: str) -> ParametersGenerator:
    """Pick the generator for an HTTP method; anything not listed uses query."""
    generator_class = GENERATORS_BY_METHOD.get(method.lower(), QueryParametersGenerator)
    return generator_class(rules)

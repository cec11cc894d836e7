"""Serializes generated documents to JSON or YAML."""

import enum
import json
from pathlib import Path

import yaml

from openapi_synth.errors import FormattingError, InvalidFormatError
from openapi_synth.generator.base import Document


class OutputFormat(enum.Enum):
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, name: str) -> "OutputFormat":
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(fmt.value for fmt in cls)
            raise InvalidFormatError(f"Invalid format {name!r}, expected one of: {choices}") from None


def detect_format(file_path: Path) -> OutputFormat:
    """Pick the output format from a file suffix. Defaults to JSON."""
    if file_path.suffix.lower() in (".yaml", ".yml"):
        return OutputFormat.YAML
    return OutputFormat.JSON


def format_document(document: Document, fmt: OutputFormat) -> str:
    data = document.to_dict()
    if fmt is OutputFormat.JSON:
        return json.dumps(data, indent=4, ensure_ascii=False)
    if fmt is OutputFormat.YAML:
        try:
            return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as e:
            raise FormattingError(f"YAMLError: {e}") from e
    raise InvalidFormatError(f"Unsupported format {fmt!r}")

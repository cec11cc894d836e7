"""Documentation comment interpreter.

Reads a handler's doc comment (a docstring or a ``/** ... */`` block) and
extracts summary, description, the deprecated flag, and the custom
``@Request`` / ``@Response`` tags::

    List users

    Returns a paginated list of users.

    @Request({
        tags: Users, Admin
        operationId: listUsers
    })
    @Response({
        code: 200
        description: List of users
    })
    @deprecated
"""

import logging
import re
from typing import Any

from openapi_synth.errors import DocBlockParseError
from openapi_synth.generator.base import Response
from openapi_synth.parser.base import ParsedDocBlock

logger = logging.getLogger(__name__)

TAG_LINE = re.compile(r"^@(?P<name>[A-Za-z_][\w-]*)(?P<body>.*)$")

TYPED_KEYS = ("summary", "description", "deprecated", "tags")

# Built by the generator, never from a tag
RESERVED_KEYS = ("parameters", "requestBody", "request_body", "security")


def parse_doc_block(text: str | None, enabled: bool = True) -> ParsedDocBlock:
    """Interpret a documentation comment.

    Returns the zero value when parsing is disabled, the text is empty, or the
    comment is malformed.
    """
    if not enabled or not text or not text.strip():
        return ParsedDocBlock()
    try:
        return _parse(text)
    except DocBlockParseError as exc:
        logger.warning("Ignoring malformed documentation block: %s", exc)
        return ParsedDocBlock()


def _parse(text: str) -> ParsedDocBlock:
    lines = _strip_comment_markers(text)
    prose, tags = _split_tags(lines)

    documentation = ParsedDocBlock()
    paragraph = [line.strip() for line in prose]
    while paragraph and not paragraph[0]:
        paragraph.pop(0)
    if paragraph:
        documentation.summary = paragraph[0]
        documentation.description = "\n".join(paragraph[1:]).strip()
    documentation.deprecated = any(name == "deprecated" for name, _ in tags)

    request_tags = [body for name, body in tags if name == "Request"]
    if request_tags:
        for key, value in parse_tag_body(request_tags[0]):
            _assign(documentation, key, value)

    for body in (body for name, body in tags if name == "Response"):
        code = None
        for key, value in parse_tag_body(body):
            if key == "code":
                if not value:
                    raise DocBlockParseError("Response code is empty")
                code = value
                documentation.responses[code] = Response(description="")
            elif key == "description":
                if code is None:
                    raise DocBlockParseError("Response description declared before its code")
                documentation.responses[code].description = value
    return documentation


def _strip_comment_markers(text: str) -> list[str]:
    text = text.strip()
    if text.startswith("/**"):
        text = text[3:]
    if text.endswith("*/"):
        text = text[:-2]
    lines = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
        lines.append(stripped.strip())
    return lines


def _split_tags(lines: list[str]) -> tuple[list[str], list[tuple[str, str]]]:
    """Separate the leading prose from ``@tag`` blocks.

    A tag body runs from the text after the tag name up to the next tag line.
    """
    prose: list[str] = []
    tags: list[tuple[str, list[str]]] = []
    for line in lines:
        match = TAG_LINE.match(line)
        if match:
            tags.append((match.group("name"), [match.group("body")]))
        elif tags:
            tags[-1][1].append(line)
        else:
            prose.append(line)
    return prose, [(name, "\n".join(body)) for name, body in tags]


def parse_tag_body(body: str) -> list[tuple[str, str]]:
    """Split a tag body into ``(key, value)`` pairs, one per line."""
    rows = body.replace("({", "").replace("})", "").splitlines()
    pairs = []
    for row in rows:
        if len(row) <= 1:
            continue
        row = row.strip().rstrip(",")
        if not row:
            continue
        key, separator, value = row.partition(":")
        if not separator or not key.strip():
            raise DocBlockParseError(f"Expected 'key: value', got {row!r}")
        pairs.append((key.strip(), value.strip()))
    return pairs


def _assign(documentation: ParsedDocBlock, key: str, value: str) -> None:
    top = key.split(".", 1)[0]
    if top in RESERVED_KEYS or (top in TYPED_KEYS and key != top):
        raise DocBlockParseError(f"Key {key!r} cannot be set from a documentation tag")
    if key == "tags":
        documentation.tags = [tag.strip() for tag in value.split(",") if tag.strip()]
    elif key == "deprecated":
        documentation.deprecated = value.lower() in ("1", "true", "yes")
    elif key in TYPED_KEYS:
        setattr(documentation, key, value)
    elif top == "responses":
        code, _, field = key[len("responses."):].partition(".")
        if field != "description" or not code:
            raise DocBlockParseError(f"Unsupported response key {key!r}")
        documentation.responses.setdefault(code, Response()).description = value
    else:
        set_dotted(documentation.extra, key, value)


def set_dotted(target: dict[str, Any], key: str, value: Any) -> None:
    """Assign ``value`` at a dotted path, creating intermediate mappings."""
    *parents, leaf = key.split(".")
    for part in parents:
        child = target.get(part)
        if not isinstance(child, dict):
            child = target[part] = {}
        target = child
    target[leaf] = value

import logging

from openapi_synth.parser.docblock import parse_doc_block, parse_tag_body, set_dotted

PHP_STYLE = """/**
 * Update a user
 *
 * Replaces the user's profile data.
 *
 * @Request({
 *     summary: Update user profile,
 *     tags: Users, Profiles
 * })
 * @Response({
 *     code: 200
 *     description: Updated
 * })
 * @Response({
 *     code: 404
 *     description: User not found
 * })
 * @deprecated
 */"""


class TestParseDocBlock:
    def test_disabled_returns_zero_value(self):
        result = parse_doc_block("Summary\n@deprecated", enabled=False)
        assert result.summary == ""
        assert result.deprecated is False
        assert result.responses == {}

    def test_empty_text(self):
        assert parse_doc_block("").summary == ""
        assert parse_doc_block(None).responses == {}

    def test_summary_and_description(self):
        result = parse_doc_block("List users\n\nReturns every user.\nPaginated.")
        assert result.summary == "List users"
        assert result.description == "Returns every user.\nPaginated."
        assert result.deprecated is False

    def test_php_style_block(self):
        result = parse_doc_block(PHP_STYLE)
        assert result.summary == "Update user profile"
        assert result.description == "Replaces the user's profile data."
        assert result.tags == ["Users", "Profiles"]
        assert result.deprecated is True
        assert set(result.responses) == {"200", "404"}
        assert result.responses["404"].description == "User not found"

    def test_request_extra_keys_use_dotted_paths(self):
        text = "Show\n@Request({\n  operationId: showUser\n  externalDocs.url: https://example.com/docs\n})"
        result = parse_doc_block(text)
        assert result.extra == {
            "operationId": "showUser",
            "externalDocs": {"url": "https://example.com/docs"},
        }

    def test_request_response_description_override(self):
        text = "Show\n@Request({\n  responses.200.description: The user\n})"
        result = parse_doc_block(text)
        assert result.responses["200"].description == "The user"

    def test_only_first_request_tag_is_used(self):
        text = "Show\n@Request({\n  tags: First\n})\n@Request({\n  tags: Second\n})"
        assert parse_doc_block(text).tags == ["First"]

    def test_response_code_without_description(self):
        result = parse_doc_block("Delete\n@Response({\n  code: 204\n})")
        assert result.responses["204"].description == ""

    def test_malformed_line_falls_back(self, caplog):
        text = "Summary\n@Request({\n  this line has no separator\n})"
        with caplog.at_level(logging.WARNING, logger="openapi_synth"):
            result = parse_doc_block(text)
        assert result.summary == ""
        assert result.tags is None
        assert "malformed" in caplog.text

    def test_description_before_code_falls_back(self):
        result = parse_doc_block("Summary\n@Response({\n  description: Orphan\n})")
        assert result.summary == ""
        assert result.responses == {}

    def test_reserved_key_falls_back(self):
        result = parse_doc_block("Summary\n@Request({\n  security: none\n})")
        assert result.summary == ""


class TestParseTagBody:
    def test_wrapper_and_trailing_commas(self):
        body = "({\n    code: 200,\n    description: OK,\n})"
        assert parse_tag_body(body) == [("code", "200"), ("description", "OK")]

    def test_short_lines_discarded(self):
        assert parse_tag_body("({\n \n;\n  code: 201\n})") == [("code", "201")]

    def test_value_may_contain_colons(self):
        assert parse_tag_body("url: http://x:8080/a") == [("url", "http://x:8080/a")]


class TestSetDotted:
    def test_creates_intermediate_mappings(self):
        target = {}
        set_dotted(target, "a.b.c", 1)
        set_dotted(target, "a.d", 2)
        assert target == {"a": {"b": {"c": 1}, "d": 2}}

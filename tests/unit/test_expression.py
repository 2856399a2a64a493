"""
Tag expression parsing (tree-sitter)
"""

import pytest

from svelte_unsafe_html.exceptions import TemplateParseError
from svelte_unsafe_html.models import Position
from svelte_unsafe_html.parsing.expression import ExpressionParser
from svelte_unsafe_html.parsing.source_file import SourceFile


def parse_body(template: str, language: str = "javascript"):
    """Parse the body of the single `{...}` tag in template."""
    source = SourceFile(file_path="Test.svelte", content=template)
    start = template.index("{") + 1
    end = template.rindex("}")
    if template[start] == "@":
        start = template.index(" ", start)
    return ExpressionParser(source, language).parse(start, end)


class TestExpressionShapes:
    def test_identifier(self):
        expression = parse_body("<div>{@html userInput}</div>")

        assert expression.type == "identifier"
        assert expression.name == "userInput"
        assert expression.text == "userInput"
        assert expression.loc.start == Position(1, 12)
        assert expression.loc.end == Position(1, 21)

    def test_direct_call(self):
        expression = parse_body("{@html sanitize(userInput)}")

        assert expression.is_call
        assert expression.callee.type == "identifier"
        assert expression.callee.name == "sanitize"

    def test_member_call(self):
        expression = parse_body("{@html DOMPurify.sanitize(userInput)}")

        assert expression.is_call
        assert expression.callee.type == "member_expression"
        assert expression.callee.name is None

    def test_tagged_template_is_not_a_call(self):
        expression = parse_body("{@html sanitize`<b>${name}</b>`}")

        assert expression.type == "tagged_template_expression"
        assert not expression.is_call
        assert expression.callee is None

    def test_optional_call_is_not_a_direct_call(self):
        expression = parse_body("{@html sanitize?.(userInput)}")

        assert expression.type == "optional_call_expression"
        assert not expression.is_call

    def test_parentheses_are_unwrapped(self):
        expression = parse_body("{@html ((sanitize(x)))}")

        assert expression.is_call
        assert expression.text == "sanitize(x)"
        assert expression.loc.start == Position(1, 9)

    def test_parenthesized_callee(self):
        expression = parse_body("{@html (sanitize)(x)}")

        assert expression.is_call
        assert expression.callee.name == "sanitize"

    def test_sequence_callee_is_not_a_name(self):
        expression = parse_body("{@html (0, sanitize)(x)}")

        assert expression.is_call
        assert expression.callee.name is None

    def test_object_literal_is_an_expression(self):
        expression = parse_body("{{ a: 1 }}")

        assert expression.type == "object"

    def test_multiline_location(self):
        expression = parse_body("<p>\n  {@html\n    body}</p>")

        assert expression.loc.start == Position(3, 4)
        assert expression.loc.end == Position(3, 8)

    def test_non_ascii_offsets_are_characters(self):
        expression = parse_body("<p>héllo {@html 'ünï' + x}</p>")

        assert expression.type == "binary_expression"
        assert expression.loc.start == Position(1, 16)
        assert expression.text == "'ünï' + x"

    def test_trailing_line_comment(self):
        expression = parse_body("{@html value // trusted}")

        assert expression.type == "identifier"

    def test_typescript_expression(self):
        expression = parse_body("{@html value as string}", language="typescript")

        assert expression.type == "as_expression"


class TestExpressionErrors:
    def test_empty_expression(self):
        with pytest.raises(TemplateParseError) as exc_info:
            parse_body("<div>{@html   }</div>")

        assert exc_info.value.code == "missing-expression"

    @pytest.mark.parametrize("body", ["a +", "a) + (b", "let x = 1", "x;", "{"])
    def test_invalid_expression(self, body):
        with pytest.raises(TemplateParseError) as exc_info:
            parse_body(f"{{@html {body}}}")

        error = exc_info.value
        assert error.code == "invalid-expression"
        assert error.filename == "Test.svelte"
        assert error.position.line == 1

    def test_typescript_syntax_rejected_as_javascript(self):
        with pytest.raises(TemplateParseError):
            parse_body("{@html value as string}")


class TestScriptCheck:
    def test_valid_script(self):
        content = "<script>let count = 0;</script>"
        source = SourceFile(file_path="Test.svelte", content=content)

        ExpressionParser(source).check_script(8, content.index("</script>"), "javascript")

    def test_invalid_script(self):
        content = "<script>\nconst = 1;\n</script>"
        source = SourceFile(file_path="Test.svelte", content=content)

        with pytest.raises(TemplateParseError) as exc_info:
            ExpressionParser(source).check_script(8, content.index("</script>"), "javascript")

        assert exc_info.value.code == "invalid-script"
        assert exc_info.value.position.line == 2

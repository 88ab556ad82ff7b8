"""
Тесты для парсера шаблонов.

Проверяет построение AST верхнего уровня: текст, ссылки, директивы #set,
отбрасывание комментариев и диагностику синтаксических ошибок.
"""

import pytest

from velo.errors import TemplateSyntaxError
from velo.expressions.model import (
    BinaryOp,
    BinaryOperator,
    IndexAccess,
    MethodCall,
    NumberLiteral,
    PropertyAccess,
    StringLiteral,
    Variable,
)
from velo.template.lexer import tokenize_template
from velo.template.nodes import ReferenceNode, SetDirectiveNode, TextNode
from velo.template.parser import TemplateParser, parse_template


class TestTemplateParser:
    """Тесты для построения AST."""

    def test_empty_template(self):
        assert parse_template("") == ()

    def test_text_only(self):
        assert parse_template("Hello") == (TextNode("Hello"),)

    def test_parser_over_token_list(self):
        ast = TemplateParser(tokenize_template("a $b")).parse()

        assert ast == (TextNode("a "), ReferenceNode(Variable("b")))

    def test_reference_between_text(self):
        ast = parse_template(" $x ")

        assert ast == (TextNode(" "), ReferenceNode(Variable("x")), TextNode(" "))

    def test_braced_and_unbraced_references_are_equivalent(self):
        assert parse_template("$a.b[1]") == parse_template("${a.b[1]}")

    def test_reference_chain(self):
        ast = parse_template("$map[2].name")

        assert ast == (
            ReferenceNode(PropertyAccess(IndexAccess(Variable("map"), NumberLiteral(2)), "name")),
        )

    def test_method_call_chain(self):
        ast = parse_template('$s.find("bar", 2).real')

        assert ast == (
            ReferenceNode(
                PropertyAccess(
                    MethodCall(Variable("s"), "find", (StringLiteral("bar"), NumberLiteral(2))),
                    "real",
                )
            ),
        )

    def test_comments_produce_no_nodes(self):
        ast = parse_template("a ##c\nb")

        assert ast == (TextNode("a "), TextNode("b"))

    def test_set_directive(self):
        ast = parse_template("#set ($x = 17)")

        assert ast == (SetDirectiveNode("x", NumberLiteral(17)),)

    def test_set_directive_with_expression(self):
        ast = parse_template("#set($x=1+2)$x")

        assert ast == (
            SetDirectiveNode(
                "x", BinaryOp(BinaryOperator.ADD, NumberLiteral(1), NumberLiteral(2))
            ),
            ReferenceNode(Variable("x")),
        )

    def test_set_directive_position(self):
        ast = parse_template("ab\n  #set ($x = 1)")
        directive = ast[1]

        assert isinstance(directive, SetDirectiveNode)
        assert directive.line == 2
        assert directive.column == 3

    def test_set_directive_swallows_newline(self):
        ast = parse_template("foo #set ($x = 17)\nbar")

        assert ast == (
            TextNode("foo "),
            SetDirectiveNode("x", NumberLiteral(17)),
            TextNode("bar"),
        )

    def test_reference_positions(self):
        ast = parse_template("x\n ${a.b}")
        reference = ast[1].reference

        assert isinstance(reference, PropertyAccess)
        assert (reference.target.line, reference.target.column) == (2, 2)
        assert (reference.line, reference.column) == (2, 5)


class TestTemplateParserErrors:
    """Тесты синтаксических ошибок."""

    def test_set_target_must_be_plain_variable(self):
        with pytest.raises(TemplateSyntaxError, match=r"#set target must be a plain variable, not \$x.y"):
            parse_template("#set ($x.y = 1)")

    def test_set_requires_equals(self):
        with pytest.raises(TemplateSyntaxError, match="Expected '=' in #set, found '1'"):
            parse_template("#set ($x 1)")

    def test_set_requires_reference_target(self):
        with pytest.raises(TemplateSyntaxError, match=r"Expected \$name after #set"):
            parse_template("#set (x = 1)")

    def test_set_requires_value(self):
        with pytest.raises(TemplateSyntaxError, match=r"Expected expression, found '\)'"):
            parse_template("#set ($x = )")

    def test_set_rejects_trailing_tokens(self):
        with pytest.raises(TemplateSyntaxError, match="to close #set"):
            parse_template("#set ($x = 1 2)")

    def test_error_location(self):
        with pytest.raises(TemplateSyntaxError) as exc:
            parse_template("line1\n#set ($x = )")

        assert exc.value.line == 2
        assert exc.value.column == 12
        assert str(exc.value) == "2:12: Expected expression, found ')'"

    def test_directive_end_in_message_has_no_newline(self):
        """Перевод строки, поглощенный ')' директивы, не попадает в текст ошибки."""
        with pytest.raises(TemplateSyntaxError) as exc:
            parse_template("ok\n#set ($x = )\nnext")
        assert str(exc.value) == "2:12: Expected expression, found ')'"

        with pytest.raises(TemplateSyntaxError) as exc:
            parse_template("#set ($x = )\r\n")
        assert str(exc.value) == "1:12: Expected expression, found ')'"

    def test_error_carries_template_name(self):
        with pytest.raises(TemplateSyntaxError) as exc:
            parse_template("#set ($x = )", template_name="page.vm")

        assert exc.value.template_name == "page.vm"
        assert str(exc.value).startswith("page.vm:1:12: ")

    def test_lexer_error_carries_template_name(self):
        with pytest.raises(TemplateSyntaxError) as exc:
            parse_template("${x", template_name="page.vm")

        assert str(exc.value).startswith("page.vm:1:1: Expected '}'")

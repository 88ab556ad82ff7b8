"""
Парсер шаблонов.

Преобразует последовательность токенов в AST (абстрактное синтаксическое дерево):
текст, подстановки ссылок и директивы #set. Выражения разбирает
ExpressionParser поверх того же потока токенов.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .lexer import TemplateLexer
from .nodes import ReferenceNode, SetDirectiveNode, TemplateAST, TemplateNode, TextNode
from .tokens import Token, TokenStream, TokenType, describe
from ..errors import TemplateSyntaxError
from ..expressions.model import Variable
from ..expressions.parser import ExpressionParser

logger = logging.getLogger(__name__)


class TemplateParser:
    """
    Парсер верхнего уровня шаблона.

    Обрабатывает последовательность токенов и строит AST, делегируя
    выражения парсеру выражений.
    """

    def __init__(self, tokens: List[Token]):
        self.stream = TokenStream(tokens)
        self.expressions = ExpressionParser(self.stream)

    def parse(self) -> TemplateAST:
        """
        Разбирает все токены до EOF.

        Returns:
            Кортеж корневых узлов AST

        Raises:
            TemplateSyntaxError: При ошибке синтаксического анализа
        """
        ast: List[TemplateNode] = []

        while not self.stream.is_at_end():
            node = self._parse_top_level()
            if node is not None:
                ast.append(node)

        return tuple(ast)

    def _parse_top_level(self) -> Optional[TemplateNode]:
        """
        Разбирает один узел верхнего уровня.

        Может быть текстом, ссылкой, директивой или комментарием.
        Комментарии узлов не порождают.
        """
        current = self.stream.current()

        if current.type == TokenType.TEXT:
            self.stream.advance()
            return TextNode(text=current.value)
        elif current.type == TokenType.COMMENT:
            self.stream.advance()
            return None
        elif current.type == TokenType.REFERENCE_START:
            return ReferenceNode(reference=self.expressions.parse_reference())
        elif current.type == TokenType.DIRECTIVE_START:
            return self._parse_set_directive()
        else:
            raise self.stream.error(f"Unexpected {describe(current)} at top level")

    def _parse_set_directive(self) -> SetDirectiveNode:
        """
        Парсит директиву #set ($name = expression).

        Завершающий перевод строки уже включен лексером в DIRECTIVE_END.
        """
        start = self.stream.consume(TokenType.DIRECTIVE_START, "#set")

        target_token = self.stream.current()
        if target_token.type != TokenType.REFERENCE_START:
            raise self.stream.error(f"Expected $name after #set (, found {describe(target_token)}")
        target = self.expressions.parse_reference()
        if not isinstance(target, Variable):
            raise self.stream.error(
                f"#set target must be a plain variable, not {target}", target_token
            )

        if not self.stream.match(TokenType.OPERATOR, "="):
            raise self.stream.error(f"Expected '=' in #set, found {describe(self.stream.current())}")

        value = self.expressions.parse_expression()
        self.stream.consume(TokenType.DIRECTIVE_END, "')' to close #set")

        return SetDirectiveNode(target.name, value, line=start.line, column=start.column)


def parse_template(text: str, template_name: str = "") -> TemplateAST:
    """
    Удобная функция: токенизация и разбор шаблона.

    Args:
        text: Текст шаблона
        template_name: Имя для сообщений об ошибках

    Raises:
        TemplateSyntaxError: При ошибке лексического или синтаксического анализа
    """
    try:
        tokens = TemplateLexer(text).tokenize()
        ast = TemplateParser(tokens).parse()
    except TemplateSyntaxError as e:
        if template_name and not e.template_name:
            raise e.with_template_name(template_name) from None
        raise

    logger.debug("Parsed template %r: %d nodes", template_name or "<string>", len(ast))
    return ast


__all__ = ["TemplateParser", "parse_template"]

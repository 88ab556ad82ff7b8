"""
Парсер выражений с рекурсивным спуском.

Строит абстрактное синтаксическое дерево выражения из потока токенов,
общего с парсером шаблона. Поддерживает приоритеты операторов,
группировку в скобках и цепочки ссылок.

Грамматика (от низшего приоритета к высшему):
expression     → or_expression
or_expression  → and_expression ("||" and_expression)*
and_expression → equality ("&&" equality)*
equality       → relational (("==" | "!=") relational)*
relational     → additive (("<" | ">" | "<=" | ">=") additive)*
additive       → multiplicative (("+" | "-") multiplicative)*
multiplicative → unary (("*" | "/" | "%") unary)*
unary          → "!" unary | "-" unary | primary
primary        → NUMBER | STRING | "true" | "false" | "(" expression ")" | reference

reference      → "$" IDENTIFIER step* | "${" IDENTIFIER step* "}"
step           → "." IDENTIFIER | "." IDENTIFIER "(" arguments? ")" | "[" expression "]"
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .model import (
    PRECEDENCE_LEVELS,
    BinaryOp,
    BinaryOperator,
    BooleanLiteral,
    Expression,
    IndexAccess,
    MethodCall,
    Negate,
    NumberLiteral,
    PropertyAccess,
    StringLiteral,
    UnaryNot,
    Variable,
)
from ..template.tokens import Token, TokenStream, TokenType, describe

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

# Предел вложенности скобок, унарных операторов и аргументов
MAX_NESTING_DEPTH = 50


class ExpressionParser:
    """
    Парсер выражений.

    Работает поверх TokenStream, который разделяет с парсером шаблона:
    после разбора выражения позиция потока стоит на первом токене за ним.
    """

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self._depth = 0

    def parse_expression(self) -> Expression:
        """
        Парсит полное выражение.

        Raises:
            TemplateSyntaxError: При нарушении грамматики или слишком глубокой вложенности
        """
        self._enter(self.stream.current())
        try:
            return self._parse_binary(0)
        finally:
            self._depth -= 1

    def parse_reference(self) -> Expression:
        """
        Парсит ссылку: переменную и цепочку шагов доступа слева направо.

        Вид каждого шага определяется следующим токеном: '.' с последующим
        '(' вплотную к имени дает вызов метода, '.' без него дает свойство,
        '[' дает индекс.
        """
        start = self.stream.consume(TokenType.REFERENCE_START, "reference")
        braced = start.value == "${"
        name = self.stream.consume(TokenType.IDENTIFIER, "variable name")
        expr: Expression = Variable(name.value, line=start.line, column=start.column)

        while True:
            if self.stream.check(TokenType.DOT):
                dot = self.stream.advance()
                member = self.stream.consume(TokenType.IDENTIFIER, "property or method name")
                if self.stream.check(TokenType.LPAREN) and self._adjacent(member, self.stream.current()):
                    self.stream.advance()
                    arguments = self._parse_arguments()
                    expr = MethodCall(expr, member.value, arguments, line=dot.line, column=dot.column)
                else:
                    expr = PropertyAccess(expr, member.value, line=dot.line, column=dot.column)
            elif self.stream.check(TokenType.LBRACKET):
                bracket = self.stream.advance()
                index = self.parse_expression()
                self.stream.consume(TokenType.RBRACKET, "']'")
                expr = IndexAccess(expr, index, line=bracket.line, column=bracket.column)
            else:
                break

        if braced:
            self.stream.consume(TokenType.REFERENCE_END, "'}'")
        return expr

    # Уровни бинарных операторов

    def _parse_binary(self, level: int) -> Expression:
        """Парсит уровень приоритета level; все уровни левоассоциативны."""
        if level == len(PRECEDENCE_LEVELS):
            return self._parse_unary()

        left = self._parse_binary(level + 1)
        while True:
            matched = self._match_operator(PRECEDENCE_LEVELS[level])
            if matched is None:
                return left
            operator, token = matched
            right = self._parse_binary(level + 1)
            left = BinaryOp(operator, left, right, line=token.line, column=token.column)

    def _match_operator(
        self, operators: Tuple[BinaryOperator, ...]
    ) -> Optional[Tuple[BinaryOperator, Token]]:
        """Проверяет и потребляет оператор из заданного уровня."""
        current = self.stream.current()
        if current.type != TokenType.OPERATOR:
            return None
        for operator in operators:
            if current.value == operator.value:
                self.stream.advance()
                return operator, current
        return None

    def _parse_unary(self) -> Expression:
        """Парсит унарные ! и - (правая ассоциативность)."""
        current = self.stream.current()

        if self.stream.match(TokenType.OPERATOR, "!"):
            return UnaryNot(self._parse_operand(current), line=current.line, column=current.column)

        if self.stream.match(TokenType.OPERATOR, "-"):
            # -2147483648 допустим только как единый литерал
            if self.stream.check(TokenType.NUMBER):
                return self._number(self.stream.advance(), negative=True, start=current)
            return Negate(self._parse_operand(current), line=current.line, column=current.column)

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """Парсит первичное выражение."""
        current = self.stream.current()

        if current.type == TokenType.NUMBER:
            return self._number(self.stream.advance())

        if current.type == TokenType.STRING:
            self.stream.advance()
            return StringLiteral(current.value, line=current.line, column=current.column)

        if current.type == TokenType.IDENTIFIER:
            if current.value in ("true", "false"):
                self.stream.advance()
                return BooleanLiteral(current.value == "true", line=current.line, column=current.column)
            raise self.stream.error(
                f"Unexpected identifier '{current.value}' (variable references start with '$')"
            )

        if current.type == TokenType.LPAREN:
            self.stream.advance()
            expr = self.parse_expression()
            self.stream.consume(TokenType.RPAREN, "')' after grouped expression")
            return expr

        if current.type == TokenType.REFERENCE_START:
            return self.parse_reference()

        raise self.stream.error(f"Expected expression, found {describe(current)}")

    # Вспомогательные методы

    def _parse_operand(self, operator: Token) -> Expression:
        """Операнд унарного оператора; каждый оператор увеличивает вложенность."""
        self._enter(operator)
        try:
            return self._parse_unary()
        finally:
            self._depth -= 1

    def _enter(self, token: Token) -> None:
        if self._depth >= MAX_NESTING_DEPTH:
            raise self.stream.error(
                f"Expression nested too deeply (more than {MAX_NESTING_DEPTH} levels)", token
            )
        self._depth += 1

    def _parse_arguments(self) -> Tuple[Expression, ...]:
        """Парсит список аргументов после '(' до закрывающей ')' включительно."""
        arguments: List[Expression] = []
        if self.stream.match(TokenType.RPAREN):
            return ()
        while True:
            arguments.append(self.parse_expression())
            if self.stream.match(TokenType.COMMA):
                continue
            self.stream.consume(TokenType.RPAREN, "',' or ')' in argument list")
            return tuple(arguments)

    def _number(self, token: Token, negative: bool = False, start: Optional[Token] = None) -> NumberLiteral:
        """Создает литерал, проверяя диапазон 32-битного знакового целого."""
        value = -int(token.value) if negative else int(token.value)
        anchor = start or token
        if not INT32_MIN <= value <= INT32_MAX:
            raise self.stream.error(f"Integer literal out of range: {value}", anchor)
        return NumberLiteral(value, line=anchor.line, column=anchor.column)

    @staticmethod
    def _adjacent(first: Token, second: Token) -> bool:
        return first.position + len(first.value) == second.position


__all__ = ["ExpressionParser", "INT32_MIN", "INT32_MAX", "MAX_NESTING_DEPTH"]

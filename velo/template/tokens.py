"""
Токены шаблона.

Определяет типы токенов шаблона и курсор по списку токенов,
общий для парсера шаблона и парсера выражений.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional

from ..errors import TemplateSyntaxError


class TokenType(enum.Enum):
    """Виды токенов, которые порождает TemplateLexer."""

    # Текст вне конструкций
    TEXT = "TEXT"
    COMMENT = "COMMENT"                      # ## ... до конца строки

    # Директивы
    DIRECTIVE_START = "DIRECTIVE_START"      # #set (
    DIRECTIVE_END = "DIRECTIVE_END"          # ) и, возможно, перевод строки

    # Ссылки
    REFERENCE_START = "REFERENCE_START"      # $ или ${
    REFERENCE_END = "REFERENCE_END"          # }
    IDENTIFIER = "IDENTIFIER"
    DOT = "DOT"                              # .

    # Выражения
    NUMBER = "NUMBER"
    STRING = "STRING"
    OPERATOR = "OPERATOR"                    # || && == != < > <= >= + - * / % !
    LPAREN = "LPAREN"                        # (
    RPAREN = "RPAREN"                        # )
    LBRACKET = "LBRACKET"                    # [
    RBRACKET = "RBRACKET"                    # ]
    COMMA = "COMMA"                          # ,

    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    Единица лексического разбора; line и column указывают на первый символ.
    """
    type: TokenType
    value: str
    position: int        # смещение от начала текста
    line: int            # Номер строки (начиная с 1)
    column: int          # Номер колонки (начиная с 1)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


def describe(token: Token) -> str:
    """Человекочитаемое описание токена для сообщений об ошибках."""
    if token.type == TokenType.EOF:
        return "end of template"
    if token.type == TokenType.DIRECTIVE_END:
        # перевод строки, поглощенный директивой, в сообщение не попадает
        return repr(token.value.rstrip("\r\n"))
    return repr(token.value)


class TokenStream:
    """
    Курсор по списку токенов.

    Оба парсера (шаблона и выражений) работают с одним экземпляром,
    поэтому позиция общая и передавать её между ними не нужно.
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("Token list must end with EOF")
        self.tokens = tokens
        self.position = 0

    def current(self) -> Token:
        """Токен под курсором."""
        return self.tokens[self.position]

    def peek(self, offset: int = 1) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def is_at_end(self) -> bool:
        return self.current().type == TokenType.EOF

    def advance(self) -> Token:
        """Сдвигает курсор (EOF не пропускается) и возвращает прежний токен."""
        token = self.current()
        if not self.is_at_end():
            self.position += 1
        return token

    def check(self, token_type: TokenType, value: Optional[str] = None) -> bool:
        token = self.current()
        return token.type == token_type and (value is None or token.value == value)

    def match(self, token_type: TokenType, value: Optional[str] = None) -> bool:
        """Проверяет и потребляет токен."""
        if self.check(token_type, value):
            self.advance()
            return True
        return False

    def consume(self, token_type: TokenType, expected: str) -> Token:
        """Потребляет токен указанного типа или выбрасывает ошибку."""
        if self.check(token_type):
            return self.advance()
        raise self.error(f"Expected {expected}, found {describe(self.current())}")

    def error(self, message: str, token: Optional[Token] = None) -> TemplateSyntaxError:
        token = token or self.current()
        return TemplateSyntaxError(message, token.line, token.column)


__all__ = ["TokenType", "Token", "TokenStream", "describe"]

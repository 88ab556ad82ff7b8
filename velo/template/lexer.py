"""
Лексер языка шаблонов.

Превращает исходный текст в плоский список токенов, который затем
разбирают TemplateParser и ExpressionParser. Лексер контекстный:
одни и те же символы означают разное в обычном тексте, внутри ссылки
$name.chain и внутри выражения директивы #set (...).
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .tokens import Token, TokenType
from ..errors import TemplateSyntaxError

logger = logging.getLogger(__name__)


class _Mode(enum.Enum):
    TEXT = "text"
    REFERENCE = "reference"
    EXPRESSION = "expression"


@dataclass
class _Frame:
    """Элемент стека режимов лексера."""
    mode: _Mode
    opener: Optional[Token] = None
    closer: str = ""             # ожидаемый закрывающий символ
    what: str = ""               # описание конструкции для ошибок
    braced: bool = False         # ссылка вида ${...}
    directive: bool = False      # выражение директивы #set (...)
    expect_name: bool = False    # следующий токен ссылки обязан быть именем
    method_allowed: bool = False  # после .name допустим вызов (...)


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Режим разбора зависит от вершины стека:
    - обычный текст и комментарии ## ...
    - ссылки $name и ${name} с цепочками .prop, .method(...), [index]
    - выражения внутри #set (...), аргументов методов и индексов
    """

    # Имя переменной: ASCII-буква, затем ASCII-буквы, цифры, '-' и '_'
    _NAME = re.compile(r'[A-Za-z][A-Za-z0-9_\-]*')
    _REFERENCE_START = re.compile(r'\$(\{)?(?=[A-Za-z])')
    _DIRECTIVE_START = re.compile(r'#set[ \t]*\(')
    _NEWLINE = re.compile(r'\r?\n')
    _WHITESPACE = re.compile(r'[ \t\r\n]+')
    _NUMBER = re.compile(r'[0-9]+')

    # Операторы в порядке убывания длины (longest match)
    _OPERATORS = ("||", "&&", "==", "!=", "<=", ">=", "<", ">", "=", "+", "-", "*", "/", "%", "!")

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1
        self.length = len(text)
        self._stack: List[_Frame] = [_Frame(_Mode.TEXT)]

    def tokenize(self) -> List[Token]:
        """
        Разбивает весь текст на токены.

        Список всегда заканчивается токеном EOF.

        Raises:
            TemplateSyntaxError: При незакрытых конструкциях и неожиданных символах
        """
        tokens: List[Token] = []

        while True:
            frame = self._stack[-1]
            if frame.mode is _Mode.TEXT:
                token = self._lex_text()
            elif frame.mode is _Mode.REFERENCE:
                token = self._lex_reference(frame)
            else:
                token = self._lex_expression(frame)

            if token is None:
                continue
            tokens.append(token)
            if token.type == TokenType.EOF:
                break

        logger.debug("Tokenized %d characters into %d tokens", self.length, len(tokens))
        return tokens

    # ---------------------------------------------------------------- text

    def _lex_text(self) -> Token:
        if self.position >= self.length:
            return self._token(TokenType.EOF, "")

        text_end = self._find_next_special_sequence()
        if text_end > self.position:
            return self._emit(TokenType.TEXT, text_end - self.position)

        if self.text.startswith("##", self.position):
            newline = self.text.find("\n", self.position)
            end = self.length if newline < 0 else newline + 1
            return self._emit(TokenType.COMMENT, end - self.position)

        match = self._DIRECTIVE_START.match(self.text, self.position)
        if match:
            token = self._emit(TokenType.DIRECTIVE_START, len(match.group(0)))
            self._stack.append(_Frame(_Mode.EXPRESSION, opener=token, closer=")",
                                      what="#set directive", directive=True))
            return token

        match = self._REFERENCE_START.match(self.text, self.position)
        assert match is not None, "special sequence must be a reference start"
        token = self._emit(TokenType.REFERENCE_START, len(match.group(0)))
        self._stack.append(_Frame(_Mode.REFERENCE, opener=token,
                                  braced=match.group(1) is not None, expect_name=True))
        return token

    def _find_next_special_sequence(self) -> int:
        """
        Позиция начала ближайшей конструкции (##, #set (, $name, ${name)
        или длина текста, если конструкций больше нет.

        Одиночные '$' и '#', не начинающие конструкцию, остаются текстом.
        """
        pos = self.position
        while pos < self.length:
            char = self.text[pos]
            if char == '#':
                if self.text.startswith("##", pos) or self._DIRECTIVE_START.match(self.text, pos):
                    return pos
            elif char == '$':
                if self._REFERENCE_START.match(self.text, pos):
                    return pos
            pos += 1
        return self.length

    # ----------------------------------------------------------- reference

    def _lex_reference(self, frame: _Frame) -> Optional[Token]:
        if frame.expect_name:
            match = self._NAME.match(self.text, self.position)
            if not match:
                raise self._error("Expected identifier")
            frame.expect_name = False
            return self._emit(TokenType.IDENTIFIER, len(match.group(0)))

        char = self._peek()
        method_allowed = frame.method_allowed
        frame.method_allowed = False

        if char == '.' and self._NAME.match(self.text, self.position + 1):
            frame.expect_name = True
            frame.method_allowed = True
            return self._emit(TokenType.DOT, 1)

        if char == '[':
            token = self._emit(TokenType.LBRACKET, 1)
            self._stack.append(_Frame(_Mode.EXPRESSION, opener=token, closer="]", what="index"))
            return token

        if char == '(' and method_allowed:
            token = self._emit(TokenType.LPAREN, 1)
            self._stack.append(_Frame(_Mode.EXPRESSION, opener=token, closer=")", what="argument list"))
            return token

        if frame.braced:
            if char == '}':
                self._stack.pop()
                return self._emit(TokenType.REFERENCE_END, 1)
            opener = frame.opener
            assert opener is not None
            message = f"Expected '}}' to close reference opened at {opener.line}:{opener.column}"
            if char == "":
                # конец текста: указываем на незакрытую ссылку
                raise TemplateSyntaxError(message, opener.line, opener.column)
            raise self._error(message)

        # Ссылка без фигурных скобок заканчивается на первом постороннем символе
        self._stack.pop()
        return None

    # ---------------------------------------------------------- expression

    def _lex_expression(self, frame: _Frame) -> Token:
        whitespace = self._WHITESPACE.match(self.text, self.position)
        if whitespace:
            self._advance(len(whitespace.group(0)))

        if self.position >= self.length:
            opener = frame.opener
            assert opener is not None
            raise TemplateSyntaxError(
                f"Unterminated {frame.what}: missing '{frame.closer}'",
                opener.line, opener.column,
            )

        char = self.text[self.position]

        if char.isascii() and char.isdigit():
            match = self._NUMBER.match(self.text, self.position)
            assert match is not None
            return self._emit(TokenType.NUMBER, len(match.group(0)))

        if char in "\"'":
            return self._lex_string(char)

        match = self._NAME.match(self.text, self.position)
        if match:
            return self._emit(TokenType.IDENTIFIER, len(match.group(0)))

        if char == '$':
            match = self._REFERENCE_START.match(self.text, self.position)
            if not match:
                raise self._error("Expected identifier after '$'")
            token = self._emit(TokenType.REFERENCE_START, len(match.group(0)))
            self._stack.append(_Frame(_Mode.REFERENCE, opener=token,
                                      braced=match.group(1) is not None, expect_name=True))
            return token

        if char == '(':
            token = self._emit(TokenType.LPAREN, 1)
            self._stack.append(_Frame(_Mode.EXPRESSION, opener=token, closer=")",
                                      what="parenthesized expression"))
            return token

        if char in ")]":
            if char != frame.closer:
                raise self._error(f"Unexpected '{char}'")
            self._stack.pop()
            if frame.directive:
                newline = self._NEWLINE.match(self.text, self.position + 1)
                length = 1 + (len(newline.group(0)) if newline else 0)
                return self._emit(TokenType.DIRECTIVE_END, length)
            return self._emit(TokenType.RPAREN if char == ')' else TokenType.RBRACKET, 1)

        if char == ',':
            return self._emit(TokenType.COMMA, 1)

        for operator in self._OPERATORS:
            if self.text.startswith(operator, self.position):
                return self._emit(TokenType.OPERATOR, len(operator))

        raise self._error(f"Unexpected character {char!r}")

    def _lex_string(self, quote: str) -> Token:
        end = self.text.find(quote, self.position + 1)
        if end < 0:
            raise self._error("Unterminated string literal")
        token = self._token(TokenType.STRING, self.text[self.position + 1:end])
        self._advance(end + 1 - self.position)
        return token

    # ------------------------------------------------------------- helpers

    def _peek(self) -> str:
        return self.text[self.position] if self.position < self.length else ""

    def _token(self, token_type: TokenType, value: str) -> Token:
        return Token(token_type, value, self.position, self.line, self.column)

    def _emit(self, token_type: TokenType, length: int) -> Token:
        """Создает токен из следующих length символов и сдвигает позицию."""
        token = self._token(token_type, self.text[self.position:self.position + length])
        self._advance(length)
        return token

    def _advance(self, count: int) -> None:
        """Сдвигает позицию на count символов с учетом переводов строк."""
        for _ in range(count):
            if self.position < self.length:
                if self.text[self.position] == '\n':
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.position += 1

    def _error(self, message: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(message, self.line, self.column)


def tokenize_template(text: str) -> List[Token]:
    """
    Токенизирует шаблон целиком.

    Raises:
        TemplateSyntaxError: Незакрытая конструкция или недопустимый символ
    """
    return TemplateLexer(text).tokenize()


__all__ = ["TemplateLexer", "tokenize_template"]

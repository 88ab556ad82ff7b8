"""
Модели данных для выражений.

Содержит неизменяемые узлы AST выражений: литералы, переменные,
унарные и бинарные операции и шаги цепочки ссылки
(.property, .method(args), [index]).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


class ExpressionType(Enum):
    """Типы узлов выражений."""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    VARIABLE = "variable"
    NOT = "not"
    NEGATE = "negate"
    BINARY = "binary"
    PROPERTY = "property"
    METHOD = "method"
    INDEX = "index"


class BinaryOperator(Enum):
    """Бинарные операторы. Значение элемента совпадает с записью в шаблоне."""
    OR = "||"
    AND = "&&"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @property
    def precedence(self) -> int:
        """Уровень приоритета: 0 для ||, далее по возрастанию."""
        return _PRECEDENCE[self]


# Уровни приоритета от низшего к высшему; внутри уровня левая ассоциативность
PRECEDENCE_LEVELS: Tuple[Tuple[BinaryOperator, ...], ...] = (
    (BinaryOperator.OR,),
    (BinaryOperator.AND,),
    (BinaryOperator.EQ, BinaryOperator.NE),
    (BinaryOperator.LT, BinaryOperator.GT, BinaryOperator.LE, BinaryOperator.GE),
    (BinaryOperator.ADD, BinaryOperator.SUB),
    (BinaryOperator.MUL, BinaryOperator.DIV, BinaryOperator.MOD),
)

_PRECEDENCE: Dict[BinaryOperator, int] = {
    operator: level
    for level, operators in enumerate(PRECEDENCE_LEVELS)
    for operator in operators
}


@dataclass(frozen=True)
class Expression(ABC):
    """Базовый абстрактный класс для всех узлов выражений."""

    @abstractmethod
    def get_type(self) -> ExpressionType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        """Строковое представление в синтаксисе шаблона."""
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """Целочисленный литерал (32-битное знаковое целое)."""
    value: int
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.NUMBER

    def _to_string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    """Строковый литерал в кавычках."""
    value: str
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.STRING

    def _to_string(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    """Литерал true / false."""
    value: bool
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.BOOLEAN

    def _to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Variable(Expression):
    """
    Переменная $name, основание любой цепочки ссылки.

    Значение берется из контекста вычисления; несвязанное имя является ошибкой.
    """
    name: str
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.VARIABLE

    def _to_string(self) -> str:
        return f"${self.name}"


@dataclass(frozen=True)
class UnaryNot(Expression):
    """Логическое отрицание: !expr"""
    operand: Expression
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.NOT

    def _to_string(self) -> str:
        return f"!{self.operand}"


@dataclass(frozen=True)
class Negate(Expression):
    """Арифметическое отрицание: -expr"""
    operand: Expression
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.NEGATE

    def _to_string(self) -> str:
        return f"-{self.operand}"


@dataclass(frozen=True)
class BinaryOp(Expression):
    """
    Бинарная операция: left op right

    Оператор принадлежит закрытому набору BinaryOperator с известным приоритетом.
    """
    operator: BinaryOperator
    left: Expression
    right: Expression
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.BINARY

    def _to_string(self) -> str:
        return f"({self.left} {self.operator.value} {self.right})"


@dataclass(frozen=True)
class PropertyAccess(Expression):
    """Шаг цепочки: target.name"""
    target: Expression
    name: str
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.PROPERTY

    def _to_string(self) -> str:
        return f"{self.target}.{self.name}"


@dataclass(frozen=True)
class MethodCall(Expression):
    """Шаг цепочки: target.name(arg, ...)"""
    target: Expression
    name: str
    arguments: Tuple[Expression, ...] = ()
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.METHOD

    def _to_string(self) -> str:
        args = ", ".join(str(arg) for arg in self.arguments)
        return f"{self.target}.{self.name}({args})"


@dataclass(frozen=True)
class IndexAccess(Expression):
    """Шаг цепочки: target[index]"""
    target: Expression
    index: Expression
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get_type(self) -> ExpressionType:
        return ExpressionType.INDEX

    def _to_string(self) -> str:
        return f"{self.target}[{self.index}]"


__all__ = [
    "ExpressionType",
    "BinaryOperator",
    "PRECEDENCE_LEVELS",
    "Expression",
    "NumberLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "Variable",
    "UnaryNot",
    "Negate",
    "BinaryOp",
    "PropertyAccess",
    "MethodCall",
    "IndexAccess",
]

"""
Вычислитель выражений.

Проходит по AST выражения и вычисляет его значение в контексте переменных:
разрешает цепочки ссылок, выполняет арифметику, сравнения, равенство
и логические операции с коротким вычислением.
"""

from __future__ import annotations

from typing import Any, cast

from . import values
from .model import (
    BinaryOp,
    BinaryOperator,
    BooleanLiteral,
    Expression,
    ExpressionType,
    IndexAccess,
    MethodCall,
    Negate,
    NumberLiteral,
    PropertyAccess,
    StringLiteral,
    UnaryNot,
    Variable,
)
from ..errors import EvaluationError
from ..introspection import AccessError, get_index, get_property, invoke_method
from ..template.context import EvaluationContext

_ARITHMETIC = {
    BinaryOperator.ADD, BinaryOperator.SUB, BinaryOperator.MUL,
    BinaryOperator.DIV, BinaryOperator.MOD,
}
_RELATIONAL = {BinaryOperator.LT, BinaryOperator.GT, BinaryOperator.LE, BinaryOperator.GE}


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает AST выражения и контекст вычисления, возвращает значение.
    Собственного изменяемого состояния не имеет.
    """

    def __init__(self, context: EvaluationContext):
        """
        Инициализирует вычислитель с контекстом.

        Args:
            context: Контекст с текущими значениями переменных
        """
        self.context = context

    def evaluate(self, expr: Expression) -> Any:
        """
        Вычисляет значение выражения.

        Args:
            expr: Корневой узел AST выражения

        Returns:
            Значение: int, str, bool или произвольный объект

        Raises:
            EvaluationError: При ошибке вычисления
        """
        expr_type = expr.get_type()

        if expr_type == ExpressionType.NUMBER:
            return cast(NumberLiteral, expr).value
        elif expr_type == ExpressionType.STRING:
            return cast(StringLiteral, expr).value
        elif expr_type == ExpressionType.BOOLEAN:
            return cast(BooleanLiteral, expr).value
        elif expr_type == ExpressionType.VARIABLE:
            variable = cast(Variable, expr)
            return self.context.lookup(variable.name, variable.line, variable.column)
        elif expr_type == ExpressionType.NOT:
            return not self.evaluate_condition(cast(UnaryNot, expr).operand)
        elif expr_type == ExpressionType.NEGATE:
            return self._evaluate_negate(cast(Negate, expr))
        elif expr_type == ExpressionType.BINARY:
            return self._evaluate_binary(cast(BinaryOp, expr))
        elif expr_type == ExpressionType.PROPERTY:
            return self._evaluate_property(cast(PropertyAccess, expr))
        elif expr_type == ExpressionType.METHOD:
            return self._evaluate_method(cast(MethodCall, expr))
        elif expr_type == ExpressionType.INDEX:
            return self._evaluate_index(cast(IndexAccess, expr))
        else:
            raise EvaluationError(f"Unknown expression type: {expr_type}")

    def evaluate_condition(self, expr: Expression) -> bool:
        """
        Вычисляет выражение в булевом контексте.

        Строгость ссылок сохраняется: несвязанная переменная остается ошибкой.
        """
        return values.is_truthy(self.evaluate(expr))

    def render(self, expr: Expression) -> str:
        """Вычисляет выражение и возвращает его текстовое представление."""
        value = self.evaluate(expr)
        if value is None:
            raise self._error(f"Reference {expr} evaluated to null", expr)
        try:
            return values.render(value)
        except EvaluationError as e:
            raise self._error(f"{e.message} (in {expr})", expr) from e.__cause__

    # Операции

    def _evaluate_negate(self, expr: Negate) -> int:
        operand = self.evaluate(expr.operand)
        if not values.is_integer(operand):
            raise self._error(f"Operator '-' requires an integer operand, got {values.type_name(operand)}", expr)
        return values.negate(operand)

    def _evaluate_binary(self, expr: BinaryOp) -> Any:
        operator = expr.operator

        # Короткое вычисление: правый операнд может не вычисляться вовсе
        if operator == BinaryOperator.AND:
            return self.evaluate_condition(expr.left) and self.evaluate_condition(expr.right)
        if operator == BinaryOperator.OR:
            return self.evaluate_condition(expr.left) or self.evaluate_condition(expr.right)

        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        if operator == BinaryOperator.EQ:
            return self._equal(left, right, expr)
        if operator == BinaryOperator.NE:
            return not self._equal(left, right, expr)

        if not (values.is_integer(left) and values.is_integer(right)):
            raise self._error(
                f"Operator '{operator.value}' requires integer operands, "
                f"got {values.type_name(left)} and {values.type_name(right)}",
                expr,
            )

        if operator in _RELATIONAL:
            return values.compare(operator.value, left, right)

        if operator in _ARITHMETIC:
            try:
                return values.arithmetic(operator.value, left, right)
            except ZeroDivisionError:
                raise self._error(f"Division by zero in {expr}", expr) from None

        raise self._error(f"Unknown operator: {operator.value}", expr)

    def _equal(self, left: Any, right: Any, expr: BinaryOp) -> bool:
        try:
            return values.values_equal(left, right)
        except EvaluationError as e:
            raise self._error(f"{e.message} (in {expr})", expr) from e.__cause__

    # Шаги цепочки ссылки

    def _evaluate_property(self, expr: PropertyAccess) -> Any:
        target = self.evaluate(expr.target)
        self._require_value(target, expr)
        try:
            return get_property(target, expr.name)
        except AccessError as e:
            raise self._error(f"{e} (in {expr})", expr) from e.__cause__

    def _evaluate_method(self, expr: MethodCall) -> Any:
        target = self.evaluate(expr.target)
        self._require_value(target, expr)
        arguments = tuple(self.evaluate(argument) for argument in expr.arguments)
        try:
            return invoke_method(target, expr.name, arguments)
        except AccessError as e:
            raise self._error(f"{e} (in {expr})", expr) from e.__cause__

    def _evaluate_index(self, expr: IndexAccess) -> Any:
        target = self.evaluate(expr.target)
        self._require_value(target, expr)
        key = self.evaluate(expr.index)
        try:
            return get_index(target, key)
        except AccessError as e:
            raise self._error(f"{e} (in {expr})", expr) from e.__cause__

    def _require_value(self, target: Any, expr: Expression) -> None:
        if target is None:
            raise self._error(f"Cannot apply {expr} to a null value", expr)

    @staticmethod
    def _error(message: str, expr: Expression) -> EvaluationError:
        return EvaluationError(message, getattr(expr, "line", 0), getattr(expr, "column", 0))


__all__ = ["ExpressionEvaluator"]

"""
Тесты для вычислителя выражений.
"""

import pytest

from velo.errors import EvaluationError
from velo.expressions.evaluator import ExpressionEvaluator
from velo.expressions.model import BinaryOp, BinaryOperator, NumberLiteral, Variable
from velo.template.context import EvaluationContext
from velo.template.parser import parse_template


def parse(source):
    (node,) = parse_template(f"#set ($r = {source})")
    return node.value


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __str__(self):
        return f"({self.x}, {self.y})"


class TestExpressionEvaluator:

    def setup_method(self):
        self.context = EvaluationContext({
            "one": 1,
            "name": "Velo",
            "empty": "",
            "items": [],
            "point": Point(3, 4),
            "nothing": None,
        })
        self.evaluator = ExpressionEvaluator(self.context)

    def evaluate(self, source):
        return self.evaluator.evaluate(parse(source))

    def test_literals(self):
        assert self.evaluate("17") == 17
        assert self.evaluate('"text"') == "text"
        assert self.evaluate("true") is True

    def test_variable_lookup(self):
        assert self.evaluate("$name") == "Velo"
        assert self.evaluate("$point") is self.context.lookup("point")

    def test_undefined_variable(self):
        """Несвязанная переменная дает ошибку с позицией ссылки."""
        with pytest.raises(EvaluationError, match=r"Undefined reference \$missing") as exc:
            self.evaluate("$missing")

        assert exc.value.line == 1
        assert exc.value.column == 12

    def test_arithmetic(self):
        assert self.evaluate("1 + 2 * 3") == 7
        assert self.evaluate("(1 + 2) * 3") == 9
        assert self.evaluate("22 / 7") == 3
        assert self.evaluate("22 % 7") == 1
        assert self.evaluate("-$one - 1") == -2

    def test_overflow_wraps(self):
        assert self.evaluate("2147483647 + 1") == -2147483648
        assert self.evaluate("-(-2147483648)") == -2147483648

    def test_division_by_zero(self):
        with pytest.raises(EvaluationError, match=r"Division by zero in \(1 / \(\$one - 1\)\)"):
            self.evaluate("1 / ($one - 1)")
        with pytest.raises(EvaluationError, match="Division by zero"):
            self.evaluate("1 % 0")

    def test_arithmetic_requires_integers(self):
        with pytest.raises(EvaluationError, match="Operator '\\+' requires integer operands, got integer and string"):
            self.evaluate('1 + "a"')
        with pytest.raises(EvaluationError, match="Operator '<' requires integer operands"):
            self.evaluate('"a" < 1')
        with pytest.raises(EvaluationError, match="got boolean and integer"):
            self.evaluate("true * 2")

    def test_negate_requires_integer(self):
        with pytest.raises(EvaluationError, match="Operator '-' requires an integer operand, got string"):
            self.evaluate("-$name")

    def test_relations(self):
        assert self.evaluate("1 < 2") is True
        assert self.evaluate("2 <= 1") is False
        assert self.evaluate("1 < 2 == 2 < 1") is False
        assert self.evaluate("2 < 1 == 2 < 1") is True

    def test_equality(self):
        assert self.evaluate('123 == "123"') is True
        assert self.evaluate('123 == "1234"') is False
        assert self.evaluate('$point == "(3, 4)"') is True
        assert self.evaluate("$nothing == $nothing") is True
        assert self.evaluate('$nothing != ""') is True

    def test_logic_returns_booleans(self):
        assert self.evaluate("1 && 2") is True
        assert self.evaluate("$empty || 0") is True
        assert self.evaluate("$items || $empty") is False
        assert self.evaluate("!$empty") is True
        assert self.evaluate("!0") is False

    def test_short_circuit(self):
        """Правый операнд не вычисляется, если результат уже известен."""
        assert self.evaluate("false && $missing") is False
        assert self.evaluate("true || $missing") is True
        assert self.evaluate("$items && 1 / 0 == 1") is False

        with pytest.raises(EvaluationError, match="Undefined reference"):
            self.evaluate("true && $missing")

    def test_evaluate_condition(self):
        assert self.evaluator.evaluate_condition(parse("$items")) is False
        assert self.evaluator.evaluate_condition(parse("$point")) is True
        assert self.evaluator.evaluate_condition(parse("$nothing")) is False

    def test_property_step(self):
        assert self.evaluate("$point.x + $point.y") == 7

    def test_method_step(self):
        assert self.evaluate("$name.upper()") == "VELO"
        assert self.evaluate('$name.startswith("Ve")') is True

    def test_index_step(self):
        self.context.assign("letters", ["a", "b"])
        assert self.evaluate("$letters[1]") == "b"

    def test_step_on_null(self):
        with pytest.raises(EvaluationError, match=r"Cannot apply \$nothing.x to a null value"):
            self.evaluate("$nothing.x")

    def test_access_error_has_step_position(self):
        with pytest.raises(EvaluationError, match=r"Point has no property 'z' \(in \$point.z\)") as exc:
            self.evaluate("$point.z")

        assert (exc.value.line, exc.value.column) == (1, 18)

    def test_host_exception_is_chained(self):
        self.context.assign("letters", ["a"])
        with pytest.raises(EvaluationError, match="list.index raised ValueError") as exc:
            self.evaluate('$letters.index("z")')

        assert isinstance(exc.value.__cause__, ValueError)

    def test_render(self):
        assert self.evaluator.render(parse("1 == 1")) == "true"
        assert self.evaluator.render(parse("$point")) == "(3, 4)"

    def test_render_null(self):
        with pytest.raises(EvaluationError, match=r"Reference \$nothing evaluated to null"):
            self.evaluator.render(parse("$nothing"))

    def test_hand_built_tree(self):
        expr = BinaryOp(BinaryOperator.MUL, Variable("one"), NumberLiteral(5))

        assert self.evaluator.evaluate(expr) == 5


class Mute:
    def __str__(self):
        raise ValueError("no text")


class TestFailingHostText:
    """Исключение из __str__ объекта становится EvaluationError с позицией."""

    def setup_method(self):
        self.evaluator = ExpressionEvaluator(EvaluationContext({"mute": Mute()}))

    def test_render(self):
        with pytest.raises(EvaluationError, match=r"Mute.__str__ raised ValueError: no text \(in \$mute\)") as exc:
            self.evaluator.render(parse("$mute"))

        assert (exc.value.line, exc.value.column) == (1, 12)
        assert isinstance(exc.value.__cause__, ValueError)

    def test_equality(self):
        with pytest.raises(EvaluationError, match="Mute.__str__ raised ValueError") as exc:
            self.evaluator.evaluate(parse('$mute == "a"'))

        assert (exc.value.line, exc.value.column) == (1, 18)
        assert isinstance(exc.value.__cause__, ValueError)

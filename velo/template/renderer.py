"""
Рендерер шаблонов.

Обходит узлы шаблона в глубину против одного контекста вычисления
и собирает итоговый текст.
"""

from __future__ import annotations

import logging
from typing import List

from .context import EvaluationContext
from .nodes import ReferenceNode, SetDirectiveNode, TemplateAST, TemplateNode, TextNode
from ..expressions.evaluator import ExpressionEvaluator

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Вычисляет AST шаблона в строку.

    Первая же ошибка прерывает вычисление; частичный результат не возвращается.
    """

    def __init__(self, context: EvaluationContext):
        self.context = context
        self.evaluator = ExpressionEvaluator(context)

    def render(self, ast: TemplateAST) -> str:
        """
        Рендерит последовательность узлов.

        Raises:
            EvaluationError: При ошибке вычисления любого узла
        """
        parts: List[str] = []
        for node in ast:
            parts.append(self._evaluate_node(node))
        return "".join(parts)

    def _evaluate_node(self, node: TemplateNode) -> str:
        if isinstance(node, TextNode):
            return node.text
        if isinstance(node, ReferenceNode):
            return self.evaluator.render(node.reference)
        if isinstance(node, SetDirectiveNode):
            value = self.evaluator.evaluate(node.value)
            self.context.assign(node.name, value)
            return ""
        raise TypeError(f"Unknown template node: {type(node).__name__}")


__all__ = ["TemplateRenderer"]

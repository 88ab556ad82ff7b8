"""
Разобранный шаблон.

Публичный API движка: разбор текста в неизменяемый Template
и его вычисление против переменных вызывающей стороны.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, TextIO, Union

from .context import EvaluationContext
from .nodes import TemplateAST
from .parser import parse_template
from .renderer import TemplateRenderer
from ..errors import EvaluationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Template:
    """
    Неизменяемый разобранный шаблон.

    Один экземпляр можно вычислять многократно против разных контекстов:
    общего изменяемого состояния у вычислений нет.
    """
    nodes: TemplateAST
    name: str = ""

    @classmethod
    def parse(cls, text: str, name: str = "") -> Template:
        """
        Разбирает текст шаблона.

        Raises:
            TemplateSyntaxError: С позицией ошибки и описанием ожидаемого
        """
        return cls(nodes=parse_template(text, name), name=name)

    @classmethod
    def parse_from(cls, reader: TextIO, name: str = "") -> Template:
        """Разбирает шаблон из текстового потока."""
        return cls.parse(reader.read(), name)

    def evaluate(self, variables: Union[Mapping[str, Any], EvaluationContext, None] = None) -> str:
        """
        Вычисляет шаблон.

        Args:
            variables: Начальные переменные или готовый контекст. Переданное
                отображение копируется; переданный контекст изменяется
                директивами #set на месте.

        Returns:
            Итоговый текст

        Raises:
            EvaluationError: При первой же ошибке вычисления
        """
        context = variables if isinstance(variables, EvaluationContext) else EvaluationContext(variables)
        logger.debug("Evaluating template %r with %d variables", self.name or "<string>", len(context))
        try:
            return TemplateRenderer(context).render(self.nodes)
        except EvaluationError as e:
            if self.name and not e.template_name:
                raise e.with_template_name(self.name) from e.__cause__
            raise


def render_template(text: str, variables: Optional[Mapping[str, Any]] = None, name: str = "") -> str:
    """Удобная функция: разбор и вычисление за один вызов."""
    return Template.parse(text, name).evaluate(variables)


__all__ = ["Template", "render_template"]

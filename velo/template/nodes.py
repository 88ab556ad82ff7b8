"""
Базовые AST-узлы шаблона.

Определяет иерархию неизменяемых классов узлов верхнего уровня.
Выражения внутри ссылок и директив описаны в velo.expressions.model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from ..expressions.model import Expression


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Представляет статический текст, который не требует обработки
    и выводится в результат как есть.
    """
    text: str


@dataclass(frozen=True)
class ReferenceNode(TemplateNode):
    """
    Подстановка ссылки: $name, ${name}, $a.b(c)[d] и т.п.

    Хранит цепочку доступа: Variable, обернутую шагами доступа.
    """
    reference: Expression


@dataclass(frozen=True)
class SetDirectiveNode(TemplateNode):
    """
    Директива присваивания #set ($name = expr).

    Сама ничего не выводит; связывает имя в контексте вычисления.
    """
    name: str
    value: Expression
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)


# Алиас для последовательности узлов (AST)
TemplateAST = Tuple[TemplateNode, ...]


__all__ = ["TemplateNode", "TextNode", "ReferenceNode", "SetDirectiveNode", "TemplateAST"]

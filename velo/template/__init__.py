"""
Шаблонизатор: лексер, парсер, узлы AST и вычисление шаблонов.
"""

from __future__ import annotations

from .context import EvaluationContext
from .template import Template, render_template

__all__ = [
    "EvaluationContext",
    "Template",
    "render_template",
]

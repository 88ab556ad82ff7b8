"""
Velo: a lightweight engine for a Velocity-compatible template language.

Supports $references with property, method and index chains, the
#set directive, ## comments and integer/boolean/string expressions.
Unbound references are always errors.
"""

from __future__ import annotations

from .errors import EvaluationError, TemplateSyntaxError, VeloUserError
from .template import EvaluationContext, Template, render_template

__all__ = [
    "Template",
    "EvaluationContext",
    "render_template",
    "VeloUserError",
    "TemplateSyntaxError",
    "EvaluationError",
]

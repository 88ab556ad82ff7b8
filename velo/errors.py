"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the template author
as clean messages (without stack traces) must inherit from VeloUserError.

Programming errors and bugs should NOT inherit from VeloUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations


class VeloUserError(Exception):
    """
    Base class for all user-facing errors of the template engine.

    These errors indicate problems that the user can fix:
    malformed templates, unbound variables, bad configuration, missing files.
    """
    pass


def _location(template_name: str, line: int, column: int) -> str:
    loc = f"{line}:{column}" if line else ""
    if template_name:
        return f"{template_name}:{loc}" if loc else template_name
    return loc


class TemplateSyntaxError(VeloUserError):
    """Malformed template text. Always fatal to the parse call."""

    def __init__(self, message: str, line: int, column: int, template_name: str = ""):
        self.message = message
        self.line = line
        self.column = column
        self.template_name = template_name
        loc = _location(template_name, line, column)
        super().__init__(f"{loc}: {message}" if loc else message)

    def with_template_name(self, template_name: str) -> TemplateSyntaxError:
        return TemplateSyntaxError(self.message, self.line, self.column, template_name)


class EvaluationError(VeloUserError):
    """
    Failure while evaluating a parsed template.

    Raised for unbound variables, missing accessors, type mismatches
    in operators and division by zero. Evaluation never continues past it.
    """

    def __init__(self, message: str, line: int = 0, column: int = 0, template_name: str = ""):
        self.message = message
        self.line = line
        self.column = column
        self.template_name = template_name
        loc = _location(template_name, line, column)
        super().__init__(f"{loc}: {message}" if loc else message)

    def with_template_name(self, template_name: str) -> EvaluationError:
        err = EvaluationError(self.message, self.line, self.column, template_name)
        err.__cause__ = self.__cause__
        return err


__all__ = ["VeloUserError", "TemplateSyntaxError", "EvaluationError"]

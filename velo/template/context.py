"""
Контекст вычисления шаблона.

Изменяемое отображение имя переменной -> значение. Создается на один вызов
вычисления из переменных вызывающей стороны и изменяется директивой #set.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from ..errors import EvaluationError

logger = logging.getLogger(__name__)


class EvaluationContext:
    """
    Контекст вычисления с политикой строгих ссылок.

    Обращение к несвязанной переменной всегда является ошибкой, а не пустая строка
    и не исходный текст ссылки. Исходное отображение вызывающей стороны
    копируется и не изменяется.
    """

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        """
        Инициализирует контекст.

        Args:
            variables: Начальные значения переменных
        """
        self._variables: Dict[str, Any] = dict(variables or {})

    def lookup(self, name: str, line: int = 0, column: int = 0) -> Any:
        """
        Возвращает значение переменной.

        Raises:
            EvaluationError: Если переменная не определена
        """
        try:
            return self._variables[name]
        except KeyError:
            raise EvaluationError(f"Undefined reference ${name}", line, column) from None

    def assign(self, name: str, value: Any) -> None:
        """Связывает имя со значением, перекрывая прежнее связывание."""
        logger.debug("#set $%s = %r", name, value)
        self._variables[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"EvaluationContext({sorted(self._variables)!r})"


__all__ = ["EvaluationContext"]

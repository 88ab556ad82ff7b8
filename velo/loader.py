"""
Загрузчик шаблонов из файлов.

Читает шаблоны относительно корневого каталога и кэширует разобранные
Template, пока файл не изменится.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import VeloUserError
from .template import Template

logger = logging.getLogger(__name__)


class TemplateNotFoundError(VeloUserError):
    """Файл шаблона не найден."""

    def __init__(self, name: str, path: Path):
        super().__init__(f"Template not found: {name} ({path})")
        self.name = name
        self.path = path


class TemplateLoader:
    """
    Загрузчик и кэш разобранных шаблонов.
    """

    def __init__(self, root: Path, encoding: str = "utf-8"):
        """
        Args:
            root: Каталог, относительно которого разрешаются имена шаблонов
            encoding: Кодировка файлов шаблонов
        """
        self.root = root
        self.encoding = encoding
        # путь -> (mtime_ns, разобранный шаблон)
        self._cache: Dict[Path, Tuple[int, Template]] = {}

    def resolve(self, name: str) -> Path:
        path = Path(name)
        if not path.is_absolute():
            path = self.root / path
        return path.resolve()

    def get_template(self, name: str) -> Template:
        """
        Возвращает разобранный шаблон по имени.

        Raises:
            TemplateNotFoundError: Если файла нет
            TemplateSyntaxError: При ошибке разбора
        """
        path = self.resolve(name)
        if not path.is_file():
            raise TemplateNotFoundError(name, path)

        mtime = path.stat().st_mtime_ns
        cached = self._cache.get(path)
        if cached is not None and cached[0] == mtime:
            logger.debug("Template cache hit: %s", path)
            return cached[1]

        logger.debug("Template cache miss: %s", path)
        text = path.read_text(encoding=self.encoding)
        template = Template.parse(text, name)
        self._cache[path] = (mtime, template)
        return template

    def render(self, name: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Загружает и вычисляет шаблон."""
        return self.get_template(name).evaluate(variables)

    def clear_cache(self) -> None:
        self._cache.clear()


__all__ = ["TemplateLoader", "TemplateNotFoundError"]

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import VeloUserError

SCHEMA_VERSION = 1
DEFAULT_CFG_FILE = "velo.yaml"

# --------------------------------------------------------------------------- #
# ДЕФОЛТЫ
# --------------------------------------------------------------------------- #
_DEFAULT_CFG: Dict[str, Any] = {
    "schema_version": SCHEMA_VERSION,
    "encoding": "utf-8",
    "templates_dir": ".",
    # переменные по умолчанию; перекрываются --vars и --var
    "variables": {},
}

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


class ConfigError(VeloUserError):
    """Некорректный файл конфигурации или переменных."""
    pass


@dataclass(frozen=True)
class VeloConfig:
    encoding: str = "utf-8"
    templates_dir: Path = Path(".")
    variables: Dict[str, Any] = field(default_factory=dict)


# --------------------------------------------------------------------------- #
# HELPERS
# --------------------------------------------------------------------------- #
def _read_mapping(path: Path, what: str) -> Dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            raw = _yaml.load(f)
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {what} {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{what.capitalize()} {path} must contain a mapping, got {type(raw).__name__}")
    return raw


def _merge_defaults(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Накладываем значения пользователя поверх дефолтов."""
    cfg = _DEFAULT_CFG.copy()
    cfg.update(raw)
    return cfg


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Path) -> VeloConfig:
    """
    Загрузить velo.yaml.

    • Нет файла: дефолты.
    • Нет schema_version: считается текущей.
    • Относительный templates_dir отсчитывается от каталога конфига.
    """
    if not path.exists():
        return VeloConfig()

    cfg = _merge_defaults(_read_mapping(path, "config"))

    if cfg["schema_version"] != SCHEMA_VERSION:
        raise ConfigError(
            f"Unsupported config schema {cfg['schema_version']} "
            f"(tool expects {SCHEMA_VERSION})"
        )

    variables = cfg["variables"] or {}
    if not isinstance(variables, dict):
        raise ConfigError(f"'variables' in {path} must be a mapping")

    templates_dir = Path(str(cfg["templates_dir"]))
    if not templates_dir.is_absolute():
        templates_dir = path.parent / templates_dir

    return VeloConfig(
        encoding=str(cfg["encoding"]),
        templates_dir=templates_dir,
        variables=dict(variables),
    )


def load_variables(path: Path) -> Dict[str, Any]:
    """Загрузить файл переменных (YAML или JSON) с отображением на верхнем уровне."""
    if not path.exists():
        raise ConfigError(f"Variables file not found: {path}")
    return _read_mapping(path, "variables file")


def parse_scalar(text: str) -> Any:
    """
    Разобрать значение --var как YAML-скаляр.

    '17' → 17, 'true' → True, всё остальное остается строкой.
    """
    try:
        value = _yaml.load(text)
    except YAMLError:
        return text
    if isinstance(value, (bool, int, str)):
        return value
    return text


__all__ = [
    "SCHEMA_VERSION",
    "DEFAULT_CFG_FILE",
    "ConfigError",
    "VeloConfig",
    "load_config",
    "load_variables",
    "parse_scalar",
]

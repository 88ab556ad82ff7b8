from pathlib import Path

import pytest

from velo.config import (
    DEFAULT_CFG_FILE,
    ConfigError,
    VeloConfig,
    load_config,
    load_variables,
    parse_scalar,
)


# ========= Тесты, использующие фикстуру tmpproj (см. tests/conftest.py) =========

def test_load_config(tmpproj: Path):
    """templates_dir отсчитывается от каталога конфига, переменные читаются как есть."""
    cfg = load_config(tmpproj / DEFAULT_CFG_FILE)

    assert cfg.encoding == "utf-8"
    assert cfg.templates_dir == tmpproj / "templates"
    assert cfg.variables == {"greeting": "Hello", "count": 3}


def test_load_variables(tmpproj: Path):
    assert load_variables(tmpproj / "vars.yaml") == {"name": "World", "count": 5}


# ========= Тесты, создающие собственный конфиг на лету =========

def test_load_config_missing(tmp_path: Path):
    """Отсутствие файла конфига не является ошибкой: используются дефолты."""
    assert load_config(tmp_path / DEFAULT_CFG_FILE) == VeloConfig()


def test_load_config_empty_file(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "")

    cfg = load_config(cfg_path)

    assert cfg.templates_dir == tmp_path / "."
    assert cfg.variables == {}


def test_absolute_templates_dir_is_kept(tmp_path: Path, write_file):
    templates = tmp_path / "elsewhere"
    cfg_path = write_file(tmp_path / "conf" / DEFAULT_CFG_FILE, f"templates_dir: {templates.as_posix()}\n")

    assert load_config(cfg_path).templates_dir == templates


def test_custom_encoding(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "encoding: cp1251\n")

    assert load_config(cfg_path).encoding == "cp1251"


def test_unsupported_schema(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "schema_version: 2\n")

    with pytest.raises(ConfigError, match="Unsupported config schema 2"):
        load_config(cfg_path)


def test_config_must_be_mapping(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "- a\n- b\n")

    with pytest.raises(ConfigError, match="must contain a mapping, got list"):
        load_config(cfg_path)


def test_variables_must_be_mapping(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "variables:\n  - 1\n")

    with pytest.raises(ConfigError, match="'variables' in .* must be a mapping"):
        load_config(cfg_path)


def test_invalid_yaml(tmp_path: Path, write_file):
    cfg_path = write_file(tmp_path / DEFAULT_CFG_FILE, "variables: [1, 2\n")

    with pytest.raises(ConfigError, match="Invalid YAML in config"):
        load_config(cfg_path)


def test_load_variables_json(tmp_path: Path, write_file):
    """JSON является подмножеством YAML, поэтому файлы .json читаются тем же загрузчиком."""
    path = write_file(tmp_path / "vars.json", '{"items": [1, 2], "title": "T"}')

    assert load_variables(path) == {"items": [1, 2], "title": "T"}


def test_load_variables_missing(tmp_path: Path):
    with pytest.raises(ConfigError, match="Variables file not found"):
        load_variables(tmp_path / "nope.yaml")


def test_load_variables_must_be_mapping(tmp_path: Path, write_file):
    path = write_file(tmp_path / "vars.yaml", "5\n")

    with pytest.raises(ConfigError, match="Variables file .* must contain a mapping, got int"):
        load_variables(path)


@pytest.mark.parametrize("text, expected", [
    ("17", 17),
    ("-3", -3),
    ("true", True),
    ("false", False),
    ("hello", "hello"),
    ("'quoted'", "quoted"),
    ("1.5", "1.5"),
    ("[1, 2]", "[1, 2]"),
    ("a: [", "a: ["),
])
def test_parse_scalar(text, expected):
    assert parse_scalar(text) == expected

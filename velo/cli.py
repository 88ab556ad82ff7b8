from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from .config import DEFAULT_CFG_FILE, VeloConfig, load_config, load_variables, parse_scalar
from .errors import VeloUserError
from .loader import TemplateLoader
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="velo",
        description="Velo: рендер шаблонов в синтаксисе Velocity ($ref, #set, ##)",
        add_help=True,
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "--config",
        metavar="PATH",
        help=f"файл конфигурации (по умолчанию ./{DEFAULT_CFG_FILE}, если есть)",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="подробный журнал (DEBUG) в stderr",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="Отрендерить шаблон в stdout или файл")
    sp_render.add_argument("template", help="путь к шаблону (относительно templates_dir)")
    sp_render.add_argument(
        "--vars",
        action="append",
        metavar="FILE",
        help="YAML/JSON-файл с переменными (можно указать несколько; поздние перекрывают ранние)",
    )
    sp_render.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="переменная из командной строки; значение разбирается как YAML-скаляр",
    )
    sp_render.add_argument("-o", "--output", metavar="OUT", help="записать результат в файл")

    sp_check = sub.add_parser("check", help="Проверить синтаксис шаблонов")
    sp_check.add_argument("templates", nargs="+", help="пути к шаблонам")

    return p


def _setup_logging(verbose: bool) -> None:
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root = logging.getLogger("velo")
    root.handlers[:] = [h]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def _load_config(ns: argparse.Namespace) -> VeloConfig:
    if ns.config:
        path = Path(ns.config)
        if not path.exists():
            raise VeloUserError(f"Config file not found: {path}")
        return load_config(path)
    return load_config(Path.cwd() / DEFAULT_CFG_FILE)


def _parse_var(item: str) -> tuple[str, Any]:
    """Парсит 'name=value' в пару (имя, значение)."""
    if "=" not in item:
        raise VeloUserError(f"Invalid --var format '{item}'. Expected 'name=value'")
    name, value = item.split("=", 1)
    name = name.strip()
    if not name:
        raise VeloUserError(f"Invalid --var format '{item}'. Variable name is empty")
    return name, parse_scalar(value)


def _collect_variables(cfg: VeloConfig, var_files: List[str] | None, var_items: List[str] | None) -> Dict[str, Any]:
    """Дефолты конфига < файлы --vars по порядку < --var."""
    variables: Dict[str, Any] = dict(cfg.variables)
    for var_file in var_files or []:
        variables.update(load_variables(Path(var_file)))
    for item in var_items or []:
        name, value = _parse_var(item)
        variables[name] = value
    return variables


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(bool(ns.verbose))

    try:
        cfg = _load_config(ns)
        loader = TemplateLoader(cfg.templates_dir, encoding=cfg.encoding)

        if ns.cmd == "render":
            variables = _collect_variables(cfg, ns.vars, ns.var)
            text = loader.render(ns.template, variables)
            if ns.output:
                Path(ns.output).write_text(text, encoding=cfg.encoding)
            else:
                sys.stdout.write(text)
            return 0

        if ns.cmd == "check":
            for name in ns.templates:
                loader.get_template(name)
                sys.stdout.write(f"ok {name}\n")
            return 0

    except VeloUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())

import os
import subprocess
import sys
import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from velo import Template

REPO_ROOT = Path(__file__).resolve().parent.parent


def write(p: Path, text: str) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def run_cli(root: Path, *args: str) -> subprocess.CompletedProcess:
    """Запускает `python -m velo` в каталоге root."""
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "velo", *args],
        cwd=root, env=env, capture_output=True, text=True, encoding="utf-8"
    )


@pytest.fixture
def render() -> Callable[..., str]:
    """Разбор и вычисление шаблона за один вызов."""
    def _render(template: str, variables: Optional[Dict[str, Any]] = None) -> str:
        return Template.parse(template).evaluate(variables or {})
    return _render


@pytest.fixture
def tmpproj(tmp_path: Path) -> Path:
    """Минимальный проект: velo.yaml + каталог шаблонов + файл переменных."""
    root = tmp_path
    write(
        root / "velo.yaml",
        textwrap.dedent("""
        schema_version: 1
        templates_dir: templates
        variables:
          greeting: Hello
          count: 3
        """).strip() + "\n",
    )
    write(root / "templates" / "hello.vm", "$greeting, $name! ## приветствие\n#set ($n = $count * 2)\n$n\n")
    write(root / "templates" / "broken.vm", "ok\n#set ($x = )\n")
    write(root / "vars.yaml", "name: World\ncount: 5\n")
    return root


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    return write


@pytest.fixture
def cli() -> Callable[..., subprocess.CompletedProcess]:
    return run_cli

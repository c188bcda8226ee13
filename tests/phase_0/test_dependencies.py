"""Packaging metadata checks for the layout backend."""

from __future__ import annotations

import re
from pathlib import Path

import pytest
import tomllib

PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = PROJECT_ROOT / "research_engine"


@pytest.fixture(scope="module")
def pyproject() -> dict:
    return tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text(encoding="utf-8"))


def _requirement_lines(name: str) -> list[str]:
    text = (PROJECT_ROOT / "requirements" / name).read_text(encoding="utf-8")
    return [line.strip() for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]


def _distribution(requirement: str) -> str:
    return re.split(r"[<>=!~ \[]", requirement, maxsplit=1)[0].lower()


def test_base_requirements_mirror_runtime_dependencies(pyproject: dict) -> None:
    assert sorted(_requirement_lines("base.txt")) == sorted(pyproject["project"]["dependencies"])


def test_dev_requirements_extend_base_with_dev_extra(pyproject: dict) -> None:
    lines = _requirement_lines("dev.txt")
    assert lines[0] == "-r base.txt"
    assert sorted(lines[1:]) == sorted(pyproject["project"]["optional-dependencies"]["dev"])


def test_every_requirement_is_pinned_from_below(pyproject: dict) -> None:
    project = pyproject["project"]
    for requirement in [*project["dependencies"], *project["optional-dependencies"]["dev"]]:
        assert ">=" in requirement, requirement


def test_imported_third_party_modules_are_declared(pyproject: dict) -> None:
    declared = {_distribution(requirement) for requirement in pyproject["project"]["dependencies"]}
    import_names = {"fastapi": "fastapi", "numpy": "numpy", "pydantic": "pydantic", "yaml": "pyyaml"}

    imported = set()
    for source in PACKAGE_ROOT.rglob("*.py"):
        for match in re.finditer(r"^(?:from|import) (\w+)", source.read_text(encoding="utf-8"), re.MULTILINE):
            if match.group(1) in import_names:
                imported.add(import_names[match.group(1)])

    assert imported <= declared
    assert imported == {"fastapi", "numpy", "pydantic", "pyyaml"}


def test_interpreter_and_pytest_settings(pyproject: dict) -> None:
    assert pyproject["project"]["requires-python"] == ">=3.11"
    pytest_options = pyproject["tool"]["pytest"]["ini_options"]
    assert pytest_options["testpaths"] == ["tests"]
    assert pytest_options["pythonpath"] == ["."]
    assert pyproject["tool"]["setuptools"]["packages"]["find"]["include"] == ["research_engine*"]

"""Nox sessions orchestrating logscope unit suites."""

from __future__ import annotations

from pathlib import Path

import nox


PYTHON_VERSIONS = ["3.11", "3.12"]
PROJECT_ROOT = Path(__file__).parent

nox.options.sessions = ["tests_unit_logging"]


def _install_test_requirements(session: nox.Session) -> None:
    """Install the package with its test toolchain inside the session environment."""

    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS, reuse_venv=True, name="tests(unit_logging)")
def tests_unit_logging(session: nox.Session) -> None:
    """Execute logging library unit suites under coverage."""

    _install_test_requirements(session)

    session.run(
        "coverage",
        "run",
        "--source",
        str(PROJECT_ROOT / "logscope"),
        "-m",
        "pytest",
        "tests/unit/logging",
        *session.posargs,
    )
    session.run("coverage", "report", "-m")

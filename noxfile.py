"""Nox sessions for testing and development tasks.

Sessions run in uv managed virtualenvs.
Run with: uv run nox [session]
"""

import shutil
from pathlib import Path

import nox

# Use uv for all sessions
nox.options.default_venv_backend = "uv"

# Stop on first failure when running multiple sessions
nox.options.stop_on_first_error = True

# Isolate and prevent running system-installed or external venv tooling.
nox.options.error_on_external_run = True

# Default sessions to run (in order) when no session is specified
# Format first for convenience (incl. lint), clean coverage, run tests, then report
nox.options.sessions = [
    "format",
    "lint",
    "cov-clean",
    "test",
    "cov-combine",
]

# Python versions to test against
PYTHON_VERSIONS = ["3.9", "3.10", "3.11", "3.12", "3.13", "3.14"]

# Tools run only on the latest Python version
TOOLS_PYTHON = PYTHON_VERSIONS[-1]


@nox.session(python=PYTHON_VERSIONS)
def test(session):
    """Run tests with coverage for each Python version."""
    # Install dependencies
    session.install(".[test]")

    # If no args provided, default to "tests" directory
    test_args = session.posargs if session.posargs else ["tests"]

    # Use --parallel-mode to write separate .coverage.* files per Python version
    session.run(
        "coverage",
        "run",
        "--parallel-mode",
        "--source",
        "consoletrace",
        "-m",
        "pytest",
        "-qq",
        *test_args,
    )


@nox.session(python=TOOLS_PYTHON)
def lint(session):
    """Run linting checks with ruff and type checking with ty."""
    session.install("ruff", "ty")
    session.run("ruff", "check", ".")
    session.run("ruff", "format", "--check", ".")
    session.run("ty", "check", "consoletrace")


@nox.session(python=TOOLS_PYTHON)
def format(session):
    """Format code with ruff."""
    session.install("ruff")
    session.run("ruff", "check", "--fix", "--unsafe-fixes", ".")
    session.run("ruff", "format", ".")


@nox.session(python=TOOLS_PYTHON, name="cov-clean")
def cov_clean(session):
    """Clean all coverage data and reports."""
    for path in Path(".").glob(".coverage*"):
        if path.is_file():
            path.unlink()

    htmlcov_path = Path("htmlcov")
    if htmlcov_path.exists():
        shutil.rmtree(htmlcov_path)

    coverage_xml = Path("coverage.xml")
    if coverage_xml.exists():
        coverage_xml.unlink()


@nox.session(python=TOOLS_PYTHON, name="cov-combine")
def cov_combine(session):
    """Generate coverage reports (HTML, XML, terminal) from collected data."""
    session.install("coverage")
    # Combine all parallel coverage data files, keeping them for future runs
    # --keep preserves the .coverage.* files so they can be combined again
    session.run("coverage", "combine", "--keep", success_codes=[0, 1])
    # Generate all reports from combined coverage data
    session.run("coverage", "report", "-m")
    session.run("coverage", "html")
    session.run("coverage", "xml")


@nox.session(python=TOOLS_PYTHON)
def clean(session):
    """Clean build artifacts and caches."""
    # First clean coverage data and reports
    session.notify("cov-clean")

    patterns = [
        "**/*.pyc",
        "**/*.pyo",
        "**/__pycache__",
        "dist",
        "build",
        "*.egg-info",
        ".pytest_cache",
        ".ruff_cache",
        ".nox",
    ]

    for pattern in patterns:
        for path in Path(".").glob(pattern):
            if path.is_dir():
                shutil.rmtree(path, ignore_errors=True)
            else:
                path.unlink()

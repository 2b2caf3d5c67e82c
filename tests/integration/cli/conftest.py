"""Fixtures for CLI integration tests."""

from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

from litvcs.cli.main import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks the CLI installed on the runner's captured stderr."""
    yield
    logger.remove()
    logger.disable("litvcs")


@pytest.fixture
def initialized_repo(workspace: Path, runner: CliRunner, monkeypatch) -> Path:
    """Create a temporary directory with an initialized lit repository.

    Returns:
        Path: Path to the workspace root, which is also the cwd
    """
    monkeypatch.chdir(workspace)

    result = runner.invoke(app, ["init", "--quiet"])
    if result.exit_code != 0:
        raise RuntimeError(f"Failed to initialize repo: {result.output}")

    return workspace

#!/usr/bin/env python3
"""
conftest.py
-----------
Shared fixtures for CLI integration tests.

Fixtures:
    runner: Click test runner
    cli_paths: Temporary store file, log directory and config path
    invoke: Helper invoking radia-store against cli_paths
"""
# --- Third-party imports ---
import pytest
from click.testing import CliRunner

# --- Local imports ---
from radia.database.cli import cli


@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


@pytest.fixture
def cli_paths(tmp_path):
    """Temporary paths for one CLI store."""
    return {
        "db_path": tmp_path / "data" / "radia_store.db",
        "log_dir": tmp_path / "logs",
        "config_path": tmp_path / "config" / "radia.yaml",
        "export_dir": tmp_path / "exports",
    }


@pytest.fixture
def invoke(runner, cli_paths):
    """Invoke the CLI with the temporary paths prepended."""

    def _invoke(args, **kwargs):
        base_args = [
            "--db-path", str(cli_paths["db_path"]),
            "--log-dir", str(cli_paths["log_dir"]),
            "--config", str(cli_paths["config_path"]),
        ]
        return runner.invoke(cli, base_args + list(args), obj={}, **kwargs)

    return _invoke

# tests/cli/test_main.py

from typer.testing import CliRunner

from clustercost import __version__
from clustercost.cli import app

runner = CliRunner()


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"ClusterCost agent version: {__version__}" in result.stdout


def test_version_option_exits_early():
    result = runner.invoke(app, ["--version", "report"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_commands_registered():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("start", "report", "version"):
        assert command in result.stdout

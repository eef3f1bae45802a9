"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from thumbtree.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "thumbtree keeps photo thumbnails" in result.output
    for command in ("generate", "show", "config"):
        assert command in result.output

"""
Unit tests for CLI main entry point.

Tests CLI infrastructure including registered commands, global options
and configuration error handling.
"""

from pathlib import Path

from click.testing import CliRunner

from transparentlog import _version
from transparentlog.cli.main import cli


class TestCLIMain:
    """Test CLI main entry point."""

    def test_cli_help(self):
        """Test CLI help output."""
        runner = CliRunner()
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        assert 'TransparentLog' in result.output
        assert '--config' in result.output
        assert '--log-level' in result.output
        assert '--verbose' in result.output

    def test_cli_lists_commands(self):
        """Test every command is registered."""
        runner = CliRunner()
        result = runner.invoke(cli, ['--help'])

        for command in [
            'append', 'get', 'head', 'prove-record', 'prove-tree',
            'check-record', 'check-tree', 'audit', 'rebuild',
        ]:
            assert command in result.output

    def test_cli_version(self):
        """Test CLI version output."""
        runner = CliRunner()
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert 'tlog' in result.output

    def test_cli_with_nonexistent_config(self, temp_dir: Path):
        """Test CLI with nonexistent config file falls back to defaults."""
        runner = CliRunner()
        result = runner.invoke(cli, ['--config', str(temp_dir / 'missing.yaml'), '--help'])
        assert result.exit_code == 0

    def test_cli_with_invalid_config(self, temp_dir: Path):
        """Test an invalid configuration exits with status 1."""
        config_path = temp_dir / 'config.yaml'
        config_path.write_text("storage:\n  backend: rocksdb\n")

        runner = CliRunner()
        result = runner.invoke(cli, ['--config', str(config_path), 'head'])

        assert result.exit_code == 1
        assert 'Invalid configuration' in result.output

    def test_cli_with_log_level_and_verbose(self, sample_config_path: Path, temp_dir: Path):
        """Test global options are accepted and logging goes to the configured file."""
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ['--config', str(sample_config_path), '--log-level', 'debug', '--verbose', 'head'],
        )

        assert result.exit_code == 0
        assert (temp_dir / 'tlog.log').exists()
        assert 'Loaded configuration from' in (temp_dir / 'tlog.log').read_text()


class TestVersion:
    """Test version lookup."""

    def test_version_file_is_read(self):
        """Test a source checkout reports the VERSION file."""
        expected = (Path(__file__).parents[2] / 'VERSION').read_text().strip()
        assert _version.get_version() == expected

    def test_unknown_without_version_file(self, temp_dir: Path, monkeypatch):
        """Test "unknown" is reported when VERSION is missing."""
        monkeypatch.setattr(_version, 'VERSION_FILE', temp_dir / 'VERSION')
        assert _version.get_version() == 'unknown'

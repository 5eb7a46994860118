"""
Unit tests for the blockreg CLI commands.

Commands run through click's CliRunner with the pipeline and services
mocked:
- publish option mapping and result output
- push alias on the main group
- error rendering and exit codes
- pull / install / view output
"""

import sys
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

import blockreg.cli.commands.install  # noqa: F401 - ensure modules are in sys.modules
import blockreg.cli.commands.publish  # noqa: F401
import blockreg.cli.commands.pull  # noqa: F401
import blockreg.cli.commands.view  # noqa: F401
from blockreg.cli import BlockregContext, cli
from blockreg.cli.commands import install, publish, pull, view
from blockreg.core.exceptions import RegistryAPIError, WorkingDirectoryError
from blockreg.core.models.registry import Artifact, AssetVersion
from blockreg.services.publish import PublishResult

publish_module = sys.modules["blockreg.cli.commands.publish"]
pull_module = sys.modules["blockreg.cli.commands.pull"]
install_module = sys.modules["blockreg.cli.commands.install"]
view_module = sys.modules["blockreg.cli.commands.view"]


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_ctx(tmp_path):
    """Create a mock BlockregContext."""
    ctx = MagicMock()
    ctx.cwd = tmp_path
    ctx.verbose = False
    return ctx


def _registration(name="acme/users", version="1.0.0"):
    return AssetVersion(
        content={"kind": "core/block-type", "metadata": {"name": name, "version": version}},
        checksum="abc",
        artifact=Artifact(type="docker", details={}),
    )


class TestPublishCommand:
    """Tests for blockreg publish."""

    def test_options_mapped(self, runner, mock_ctx, tmp_path):
        """Flags become PublishOptions and the reporter is passed through."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.return_value = PublishResult(
                references={"acme/users": "1.1.0"}
            )
            result = runner.invoke(
                publish,
                [str(tmp_path), "--skip-tests", "--dry-run", "--no-version-check"],
                obj=mock_ctx,
            )

        assert result.exit_code == 0, result.output
        args, kwargs = mock_pipeline.call_args
        assert args[0] == str(tmp_path)
        options = args[1]
        assert options.skip_tests is True
        assert options.dry_run is True
        assert options.check_version is False
        assert options.auto_versioning is False
        assert kwargs["reporter"] is mock_ctx.reporter
        assert kwargs["registry_client"] is None

    def test_registry_override(self, runner, mock_ctx, tmp_path):
        """--registry builds a client for that URL."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline, patch.object(
            publish_module, "RegistryClient"
        ) as mock_client:
            mock_pipeline.return_value.run.return_value = PublishResult()
            result = runner.invoke(
                publish, [str(tmp_path), "--registry", "https://r.example.com"], obj=mock_ctx
            )

        assert result.exit_code == 0, result.output
        mock_client.assert_called_once_with(base_url="https://r.example.com")
        assert mock_pipeline.call_args.kwargs["registry_client"] is mock_client.return_value

    def test_result_output(self, runner, mock_ctx, tmp_path):
        """Published references, skipped assets and tags are listed."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.return_value = PublishResult(
                references={"acme/users": "1.1.0", "acme/db": "2.0.0"},
                skipped=["acme/db"],
                tags=["v1.1.0-users"],
            )
            result = runner.invoke(publish, [str(tmp_path)], obj=mock_ctx)

        assert "Published:" in result.output
        assert "  acme/users:1.1.0\n" in result.output
        assert "  acme/db:2.0.0 (already existed)" in result.output
        assert "Tags: v1.1.0-users" in result.output

    def test_dry_run_output(self, runner, mock_ctx, tmp_path):
        """Dry runs say nothing was published."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.return_value = PublishResult(
                references={"acme/users": "1.1.0"}, dry_run=True
            )
            result = runner.invoke(publish, [str(tmp_path), "--dry-run"], obj=mock_ctx)

        assert "Dry run - nothing was published:" in result.output

    def test_verbose_flag(self, runner, mock_ctx, tmp_path):
        """--verbose turns on debug output for the command."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.return_value = PublishResult()
            runner.invoke(publish, [str(tmp_path), "--verbose"], obj=mock_ctx)

        mock_ctx.set_verbose.assert_called_once_with(True)

    def test_error_rendered(self, runner, mock_ctx, tmp_path):
        """Blockreg errors print a message and exit with their code."""
        with patch.object(publish_module, "PublishPipeline") as mock_pipeline:
            mock_pipeline.return_value.run.side_effect = WorkingDirectoryError(
                "Working directory is not clean"
            )
            result = runner.invoke(publish, [str(tmp_path)], obj=mock_ctx)

        assert result.exit_code == WorkingDirectoryError.exit_code
        assert "Error: Working directory is not clean" in result.output

    def test_missing_directory(self, runner, mock_ctx, tmp_path):
        """A directory that does not exist is a usage error."""
        result = runner.invoke(publish, [str(tmp_path / "nope")], obj=mock_ctx)
        assert result.exit_code == 2


class TestMainGroup:
    """Tests for the top-level group."""

    def test_help_without_command(self, runner):
        """No subcommand prints help."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "publish" in result.output

    def test_push_alias(self, runner, mock_ctx, tmp_path):
        """push runs the publish command."""
        with (
            patch.object(BlockregContext, "create", return_value=mock_ctx) as mock_create,
            patch.object(publish_module, "PublishPipeline") as mock_pipeline,
        ):
            mock_pipeline.return_value.run.return_value = PublishResult()
            result = runner.invoke(cli, ["-v", "push", str(tmp_path)])

        assert result.exit_code == 0, result.output
        mock_create.assert_called_once_with(verbose=True)
        mock_pipeline.return_value.run.assert_called_once()

    def test_version(self, runner):
        """--version prints the program name."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "blockreg" in result.output


class TestConsumerCommands:
    """Tests for pull, install and view."""

    def test_pull(self, runner, mock_ctx, tmp_path):
        """pull reports where the artifact went."""
        with patch.object(pull_module, "PullService") as mock_service:
            mock_service.return_value.pull.return_value = _registration()
            result = runner.invoke(
                pull, ["acme/users:1.0.0", "-t", str(tmp_path)], obj=mock_ctx
            )

        assert result.exit_code == 0, result.output
        mock_service.return_value.pull.assert_called_once_with("acme/users:1.0.0", str(tmp_path))
        assert f"Pulled acme/users:1.0.0 into {tmp_path}" in result.output

    def test_install_many(self, runner, mock_ctx, tmp_path):
        """install handles every URI in order."""
        with patch.object(install_module, "PullService") as mock_service:
            mock_service.return_value.install.side_effect = [tmp_path / "a", tmp_path / "b"]
            result = runner.invoke(install, ["acme/a", "acme/b:1.0.0"], obj=mock_ctx)

        assert result.exit_code == 0, result.output
        assert f"acme/a -> {tmp_path / 'a'}" in result.output
        assert f"acme/b:1.0.0 -> {tmp_path / 'b'}" in result.output

    def test_install_requires_uri(self, runner, mock_ctx):
        """install without arguments is a usage error."""
        assert runner.invoke(install, [], obj=mock_ctx).exit_code == 2

    def test_view(self, runner, mock_ctx):
        """view prints the summary and the definition."""
        with patch.object(view_module, "PullService") as mock_service:
            mock_service.return_value.lookup.return_value = _registration()
            result = runner.invoke(view, ["acme/users:1.0.0"], obj=mock_ctx)

        assert result.exit_code == 0, result.output
        assert "acme/users:1.0.0" in result.output
        assert "Checksum: abc" in result.output
        assert "kind: core/block-type" in result.output

    def test_view_not_found(self, runner, mock_ctx):
        """Lookup failures exit non-zero with the registry message."""
        with patch.object(view_module, "PullService") as mock_service:
            mock_service.return_value.lookup.side_effect = RegistryAPIError(
                "Asset not found: acme/users:9.9.9", status_code=404
            )
            result = runner.invoke(view, ["acme/users:9.9.9"], obj=mock_ctx)

        assert result.exit_code != 0
        assert "Error: Asset not found: acme/users:9.9.9" in result.output

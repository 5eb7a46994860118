"""
Unit tests for pulling and installing registered assets.
"""

from unittest.mock import MagicMock

import pytest

from blockreg.core.exceptions import HandlerNotFoundError, RegistryAPIError
from blockreg.core.models.registry import Artifact, AssetVersion
from blockreg.services.pull import PullService


def _version(name="acme/users", version="1.0.0", artifact_type="docker"):
    return AssetVersion(
        content={"kind": "core/block-type", "metadata": {"name": name, "version": version}},
        checksum="sum",
        artifact=Artifact(type=artifact_type, details={"primary": f"img/{name}:{version}"}),
    )


@pytest.fixture
def registry():
    client = MagicMock()
    client.get_version.return_value = _version()
    return client


@pytest.fixture
def handler():
    return MagicMock()


@pytest.fixture
def handlers(handler):
    registry = MagicMock()
    registry.artifact_handler_for_type.return_value = handler
    return registry


@pytest.fixture
def service(registry, handlers, reporter, tmp_path):
    return PullService(
        registry_client=registry,
        handlers=handlers,
        reporter=reporter,
        repository_base=tmp_path / "repository",
    )


class TestLookup:
    """Test version lookup."""

    def test_found(self, service, registry):
        """Test the registered version is returned."""
        assert service.lookup("acme/users:1.0.0").version == "1.0.0"
        registry.get_version.assert_called_once_with("acme/users", "1.0.0")

    def test_default_version(self, service, registry):
        """Test references without a version ask for ``current``."""
        service.lookup("acme/users")
        registry.get_version.assert_called_once_with("acme/users", "current")

    def test_not_found(self, service, registry):
        """Test a missing version raises a 404 RegistryAPIError."""
        registry.get_version.return_value = None
        with pytest.raises(RegistryAPIError) as exc_info:
            service.lookup("acme/users:9.9.9")
        assert exc_info.value.status_code == 404


class TestPull:
    """Test pulling into a directory."""

    def test_pull(self, service, handlers, handler, registry, reporter, tmp_path):
        """Test the handler for the recorded artifact type fetches the artifact."""
        service.pull("acme/users:1.0.0", tmp_path / "out")

        handlers.artifact_handler_for_type.assert_called_once_with(
            "docker", str(tmp_path / "out"), reporter=reporter
        )
        handler.pull.assert_called_once_with(
            {"primary": "img/acme/users:1.0.0"}, str(tmp_path / "out"), registry
        )
        assert "Pulling acme/users:1.0.0" in reporter.labels("ok")

    def test_unknown_artifact_type(self, service, handlers, tmp_path):
        """Test an unknown type surfaces HandlerNotFoundError."""
        handlers.artifact_handler_for_type.side_effect = HandlerNotFoundError("nope")
        with pytest.raises(HandlerNotFoundError):
            service.pull("acme/users:1.0.0", tmp_path)

    def test_no_artifact(self, service, registry, tmp_path):
        """Test versions without an artifact cannot be pulled."""
        registry.get_version.return_value = AssetVersion(
            content={"metadata": {"name": "acme/users", "version": "1.0.0"}}
        )
        with pytest.raises(RegistryAPIError, match="no artifact"):
            service.pull("acme/users:1.0.0", tmp_path)


class TestInstall:
    """Test installing into the local repository."""

    def test_install(self, service, handler, tmp_path):
        """Test pull then install into repository/handle/name/version."""
        target = service.install("acme/users:1.0.0")

        assert target == tmp_path / "repository" / "acme" / "users" / "1.0.0"
        handler.pull.assert_called_once()
        scratch = handler.pull.call_args.args[1]
        handler.install.assert_called_once_with(scratch, str(target))
        assert (target / "block.yml").exists()

    def test_already_installed(self, service, handler, reporter, tmp_path):
        """Test an existing installation is left alone."""
        existing = tmp_path / "repository" / "acme" / "users" / "1.0.0"
        existing.mkdir(parents=True)

        assert service.install("acme/users:1.0.0") == existing
        handler.pull.assert_not_called()
        assert "acme/users:1.0.0 is already installed" in reporter.labels("info")

    def test_resolved_version_used(self, service, registry, tmp_path):
        """Test ``current`` installs under the version the registry resolved."""
        registry.get_version.return_value = _version(version="2.3.4")
        target = service.install("acme/users")
        assert target.name == "2.3.4"

"""
Pull and install registered assets.

The artifact handler is chosen by the type recorded with the version, since
there is no source directory to inspect.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import yaml

from ..core.di import resolve_or_default
from ..core.exceptions import RegistryAPIError
from ..core.interfaces.logger import ILogger
from ..core.interfaces.reporter import IProgressReporter
from ..core.models.registry import AssetVersion
from ..core.registry import HandlerRegistry
from ..registry_client import RegistryClient
from .publish.definitions import DEFINITION_FILENAMES, find_definition_file
from .repository import AssetUri, repository_path


class PullService:
    """Fetches asset versions into directories or the local repository."""

    def __init__(
        self,
        registry_client: RegistryClient | None = None,
        handlers: HandlerRegistry | None = None,
        reporter: IProgressReporter | None = None,
        repository_base: str | Path | None = None,
        logger: ILogger | None = None,
    ):
        from ..presenters.console import NullReporter
        from .logging import NullLogger

        self._registry_client = registry_client
        self.handlers = handlers or HandlerRegistry()
        self.reporter = reporter or resolve_or_default(IProgressReporter, NullReporter)  # type: ignore[type-abstract]
        self.repository_base = repository_base
        self._logger = logger or resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]

    @property
    def registry_client(self) -> RegistryClient:
        if self._registry_client is None:
            self._registry_client = RegistryClient()
        return self._registry_client

    def lookup(self, uri: str | AssetUri) -> AssetVersion:
        """
        Registered version for ``uri``.

        Raises:
            RegistryAPIError: If the version does not exist
        """
        parsed = uri if isinstance(uri, AssetUri) else AssetUri.parse(uri)
        registration = self.reporter.progress(
            f"Looking up {parsed}",
            lambda: self.registry_client.get_version(parsed.full_name, parsed.version),
        )
        if registration is None:
            raise RegistryAPIError(f"Asset not found: {parsed}", status_code=404)
        return registration

    def pull(self, uri: str | AssetUri, target: str | Path) -> AssetVersion:
        """
        Fetch the artifact of ``uri`` into ``target``.

        Raises:
            HandlerNotFoundError: If the artifact type is unknown
            RegistryAPIError: If the version does not exist
        """
        registration = self.lookup(uri)
        if registration.artifact is None:
            raise RegistryAPIError(f"{uri} has no artifact to pull")

        handler = self.handlers.artifact_handler_for_type(
            registration.artifact.type, str(target), reporter=self.reporter
        )
        self.reporter.progress(
            f"Pulling {registration.name}:{registration.version}",
            lambda: handler.pull(registration.artifact.details, str(target), self.registry_client),
        )
        return registration

    def install(self, uri: str | AssetUri) -> Path:
        """
        Install ``uri`` into the local repository unless it is already there.

        Returns:
            Installation directory
        """
        registration = self.lookup(uri)
        parsed = uri if isinstance(uri, AssetUri) else AssetUri.parse(uri)
        handle, _, name = registration.name.partition("/")
        target = repository_path(
            handle or parsed.handle,
            name or parsed.name,
            registration.version or parsed.version,
            self.repository_base,
        )

        if target.exists():
            self.reporter.info("%s:%s is already installed", registration.name, registration.version)
            return target

        if registration.artifact is None:
            raise RegistryAPIError(f"{uri} has no artifact to install")

        handler = self.handlers.artifact_handler_for_type(
            registration.artifact.type, str(target), reporter=self.reporter
        )
        with tempfile.TemporaryDirectory(prefix="blockreg-") as scratch:
            self.reporter.progress(
                f"Pulling {registration.name}:{registration.version}",
                lambda: handler.pull(registration.artifact.details, scratch, self.registry_client),
            )
            self.reporter.progress(
                f"Installing {registration.name}:{registration.version}",
                lambda: handler.install(scratch, str(target)),
            )

        # Image-only artifacts leave nothing on disk; the definition marks the install
        if find_definition_file(target) is None:
            target.mkdir(parents=True, exist_ok=True)
            with open(target / DEFINITION_FILENAMES[0], "w", encoding="utf-8") as f:
                yaml.safe_dump(registration.content, f, sort_keys=False)
        self._logger.debug("Installed %s into %s", registration.name, target)
        return target

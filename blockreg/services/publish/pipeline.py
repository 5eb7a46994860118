"""
Publish pipeline.

Drives one asset source directory through the publish workflow:
1. Verify the definition file
2. Verify the working tree (when under version control)
3. Resolve ``local`` dependencies, publishing them first
4. Compute the source checksum
5. Check the version against the registry
6. Build and test
7. Reserve versions, push artifacts and commit (abort on any failure)
8. Tag and push the VCS checkout
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ...core.di import resolve_or_default
from ...core.exceptions import (
    BlockregException,
    BuildError,
    DefinitionError,
    ProcessExecutionError,
    TestsFailedError,
    VersionConflictError,
    VersionExistsError,
    VersionIncrementError,
    WorkingDirectoryError,
)
from ...core.interfaces.artifact import IArtifactHandler
from ...core.interfaces.logger import ILogger
from ...core.interfaces.reporter import IProgressReporter
from ...core.interfaces.vcs import IVCSHandler
from ...core.models.registry import AssetVersion, Repository, Reservation
from ...core.registry import HandlerRegistry
from ...registry_client import RegistryClient
from ...versioning.calculator import (
    IncrementType,
    calculate_increment_type,
    compare_definitions,
    increment_version_by,
    is_increment_greater_than,
    max_increment,
)
from ..execution.process import ProcessRunner
from .definitions import AssetSource, find_definition_file, read_definitions, read_readme
from .dependencies import DependencyResolver, LocalVersionCache, relink_same_source

BUILD_SCRIPT = "scripts/build.sh"
TEST_SCRIPT = "scripts/test.sh"


@dataclass
class PublishOptions:
    """Caller switches for one publish."""

    ignore_working_directory: bool = False
    skip_tests: bool = False
    dry_run: bool = False
    auto_versioning: bool = False
    check_version: bool = True
    reservation_ttl: int | None = None
    # Versions already registered with the same checksum count as published
    accept_existing: bool = False


@dataclass
class PublishResult:
    """Outcome of a publish."""

    references: dict[str, str] = field(default_factory=dict)
    committed: list[AssetVersion] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    dry_run: bool = False


class PublishPipeline:
    """
    Publishes every asset defined in one source directory.

    Nothing is mutated in the registry before the reservation; from the
    reservation onward any failure aborts it and re-raises the original
    error.
    """

    def __init__(
        self,
        directory: str | Path,
        options: PublishOptions | None = None,
        *,
        registry_client: RegistryClient | None = None,
        handlers: HandlerRegistry | None = None,
        reporter: IProgressReporter | None = None,
        cache: LocalVersionCache | None = None,
        runner: ProcessRunner | None = None,
        config: Any = None,
        logger: ILogger | None = None,
    ):
        """
        Args:
            directory: Asset source directory
            options: Publish switches
            registry_client: Registry client (default: configured client)
            handlers: Handler registry (default: global container)
            reporter: Progress sink (default: resolved from the container)
            cache: Local version cache shared with recursive publishes
            runner: Process runner for override scripts
            config: Settings object (default: loaded for ``directory``)
            logger: Logger instance. If None, resolves from DI container.
        """
        from ...presenters.console import NullReporter
        from ..logging import NullLogger

        self.directory = Path(directory).resolve()
        self.options = options or PublishOptions()
        self._registry_client = registry_client
        self.handlers = handlers or HandlerRegistry()
        self.reporter = reporter or resolve_or_default(IProgressReporter, NullReporter)  # type: ignore[type-abstract]
        self.cache = cache if cache is not None else LocalVersionCache()
        self.runner = runner or ProcessRunner(self.reporter)
        self._config = config
        self._logger = logger or resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]

    @property
    def registry_client(self) -> RegistryClient:
        """Get or create the registry client."""
        if self._registry_client is None:
            self._registry_client = RegistryClient()
        return self._registry_client

    @property
    def config(self) -> Any:
        if self._config is None:
            from ...core.settings import load_settings

            self._config = load_settings(start_dir=str(self.directory))
        return self._config

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def run(self) -> PublishResult:
        """
        Publish the source directory.

        Returns:
            PublishResult with the version every asset resolved to

        Raises:
            BlockregException: Whatever step failed, unchanged
        """
        source = self.reporter.progress("Verifying files exist", self.verify_files)
        with self.cache.publishing(source.names):
            return self._publish(source)

    def _publish(self, source: AssetSource) -> PublishResult:
        vcs = self._detect_vcs()

        if vcs is not None and not self.options.ignore_working_directory:
            self.reporter.progress(
                "Verifying working directory", lambda: self.verify_working_tree(vcs)
            )

        handler = self.handlers.artifact_handler_for(
            str(self.directory),
            reporter=self.reporter,
            runner=self.runner,
            config=self.config,
        )
        self.reporter.info("Artifact type: %s", handler.get_name())
        self.reporter.progress(f"Verifying {handler.get_name()} tooling", handler.verify)

        resolution = self.reporter.progress(
            "Resolving local dependencies", lambda: self.resolve_dependencies(source)
        )

        # Checksums are computed from sources and must not depend on build output
        checksum = self.reporter.progress("Calculating checksum", handler.calculate_checksum)
        self.reporter.info("Checksum: %s", checksum)

        existing: dict[str, str] = {}
        if self.options.check_version:
            existing = self.check_versions(source, checksum)
        relink_same_source(resolution.same_source, source)

        if existing and len(existing) == len(source.definitions):
            self.reporter.info("All versions already published")
            return PublishResult(references=dict(existing), skipped=list(existing))

        self.reporter.progress("Building", lambda: self.build(handler))

        if self.options.skip_tests:
            self.reporter.info("Skipping tests...")
        else:
            self.reporter.progress("Running tests", lambda: self.test(handler))

        repository = self._snapshot(vcs)

        reservation = self.reporter.progress(
            "Reserving version",
            lambda: self.registry_client.reserve(
                source.snapshot(),
                branch=repository.branch if repository else None,
                commit=repository.commit if repository else None,
                checksum=checksum,
                ttl=self._reservation_ttl(),
            ),
        )

        try:
            result = self._push_and_commit(source, handler, reservation, checksum, repository)
        except BaseException:
            self.abort(reservation)
            raise

        if vcs is not None and repository is not None and not result.dry_run:
            result.tags = self.tag_and_push(vcs, repository, result.committed, source)

        return result

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def verify_files(self) -> AssetSource:
        """
        Locate and parse the definition file.

        Raises:
            DefinitionError: If the file is missing, not a file or invalid
        """
        path = find_definition_file(self.directory)
        if not self.reporter.check("Definition file exists", path is not None):
            raise DefinitionError(
                f"No definition file found in {self.directory}", file_path=str(self.directory)
            )
        if not self.reporter.check(f"{path.name} is file", path.is_file()):
            raise DefinitionError(
                f"{path} is not a file. A valid file must be specified", file_path=str(path)
            )
        return AssetSource(directory=self.directory, file=path, definitions=read_definitions(path))

    def _detect_vcs(self) -> IVCSHandler | None:
        vcs = self.handlers.vcs_handler_for(str(self.directory))
        if vcs is not None:
            self.reporter.info("Identified version control system: %s", vcs.name)
        else:
            self.reporter.warn("No version control system found in folder.")
        return vcs

    def verify_working_tree(self, vcs: IVCSHandler) -> None:
        """
        Raises:
            WorkingDirectoryError: If the tree is dirty or behind its remote
        """
        status = vcs.get_status(str(self.directory))
        if not self.reporter.check("Working directory is clean", status.clean):
            raise WorkingDirectoryError(
                "Working directory is not clean. Make sure everything is committed "
                "or use --ignore-working-directory to ignore",
                repo_path=str(self.directory),
            )
        if not self.reporter.check("Working directory is up to date", status.up_to_date):
            raise WorkingDirectoryError(
                "Working directory is not up to date with remote. Pull the latest changes "
                "or use --ignore-working-directory to continue.",
                repo_path=str(self.directory),
            )

    def resolve_dependencies(self, source: AssetSource):
        resolver = DependencyResolver(
            source,
            self.cache,
            self._publish_dependency,
            reporter=self.reporter,
            repository_base=self.config.repository.path,
        )
        return resolver.resolve()

    def _publish_dependency(self, directory: Path) -> dict[str, str]:
        options = dataclasses.replace(self.options, accept_existing=True)
        pipeline = PublishPipeline(
            directory,
            options,
            registry_client=self._registry_client,
            handlers=self.handlers,
            reporter=self.reporter,
            cache=self.cache,
            runner=self.runner,
            config=self._config,
            logger=self._logger,
        )
        return pipeline.run().references

    def _run_script(self, script: Path) -> None:
        self.runner.run(["sh", str(script)], self.directory)

    def build(self, handler: IArtifactHandler) -> None:
        """
        Run ``scripts/build.sh`` if present, otherwise the handler's build.

        Raises:
            BuildError: If the build fails
        """
        script = self.directory / BUILD_SCRIPT
        try:
            if script.is_file():
                self._run_script(script)
            else:
                handler.build()
        except BuildError:
            raise
        except ProcessExecutionError as e:
            raise BuildError(cause=e) from e

    def test(self, handler: IArtifactHandler) -> None:
        """
        Run ``scripts/test.sh`` if present, otherwise the handler's tests.

        Raises:
            TestsFailedError: If the tests fail
        """
        script = self.directory / TEST_SCRIPT
        try:
            if script.is_file():
                self._run_script(script)
            else:
                handler.test()
        except TestsFailedError:
            raise
        except ProcessExecutionError as e:
            raise TestsFailedError(cause=e) from e

    def check_versions(self, source: AssetSource, checksum: str) -> dict[str, str]:
        """
        Check each definition's version against the registry.

        Auto-versioned versions are written to the in-memory definitions only.

        Returns:
            Assets already registered with this checksum (when accepted)

        Raises:
            VersionExistsError: Same version and checksum already registered
            VersionConflictError: Same version, other content, no auto-versioning
            VersionIncrementError: Manual version jump smaller than required
        """
        existing_refs: dict[str, str] = {}
        for definition in source.definitions:
            metadata = definition["metadata"]
            name, version = metadata["name"], metadata["version"]

            def check(definition=definition, name=name, version=version) -> None:
                existing = self.registry_client.get_version(name, version)
                if existing is not None:
                    if existing.checksum == checksum:
                        if self.options.accept_existing:
                            existing_refs[name] = version
                            return
                        raise VersionExistsError(name, version, checksum)
                    if not self.options.auto_versioning:
                        raise VersionConflictError(name, version)
                    required = max_increment(
                        compare_definitions(definition, existing.content), IncrementType.PATCH
                    )
                    definition["metadata"]["version"] = increment_version_by(version, required)
                    self.reporter.info(
                        "Calculated next semantic version to be: %s",
                        definition["metadata"]["version"],
                    )
                    return

                previous = self.registry_client.get_latest_version_before(name, version)
                if previous is None:
                    return
                actual = calculate_increment_type(previous.version, version)
                required = compare_definitions(definition, previous.content)
                if is_increment_greater_than(required, actual):
                    raise VersionIncrementError(version, previous.version, actual, required)

            self.reporter.progress(f"Checking version {name}:{version}", check)
        return existing_refs

    def _snapshot(self, vcs: IVCSHandler | None) -> Repository | None:
        """VCS snapshot shared by every version in this push."""
        if vcs is None:
            return None
        directory = str(self.directory)
        branch = vcs.get_branch(directory)
        details: dict[str, Any] = {}
        try:
            details = vcs.get_checkout_info(directory).model_dump()
        except BlockregException as e:
            self._logger.debug("No checkout info for %s: %s", directory, e)
            self.reporter.warn("Could not determine checkout info: %s", e.message)
        return Repository(
            type=vcs.type,
            commit=vcs.get_latest_commit(directory),
            branch=branch,
            main=branch in self.config.vcs.main_branches,
            details=details,
        )

    def _reservation_ttl(self) -> int | None:
        if self.options.reservation_ttl is not None:
            return self.options.reservation_ttl
        return self.config.registry.reservation_ttl

    def _push_and_commit(
        self,
        source: AssetSource,
        handler: IArtifactHandler,
        reservation: Reservation,
        checksum: str,
        repository: Repository | None,
    ) -> PublishResult:
        result = PublishResult(dry_run=self.options.dry_run)
        for reserved in reservation.versions:
            result.references[reserved.name] = reserved.version
            if reserved.exists:
                result.skipped.append(reserved.name)
                self.reporter.info(
                    "%s:%s already exists - skipping", reserved.name, reserved.version
                )

        if self.options.dry_run:
            for reserved in reservation.new_versions():
                self.reporter.info("Dry run - would publish %s:%s", reserved.name, reserved.version)
            self.abort(reservation)
            return result

        new_versions = reservation.new_versions()
        if not new_versions:
            self.abort(reservation)
            return result

        readme = read_readme(source.directory)
        commit_id = repository.commit if repository else None
        versions: list[AssetVersion] = []
        for reserved in new_versions:
            artifact = self.reporter.progress(
                f"Pushing {reserved.name}:{reserved.version}",
                lambda reserved=reserved: handler.push(reserved.name, reserved.version, commit_id),
            )
            versions.append(
                AssetVersion(
                    content=reserved.content,
                    checksum=checksum,
                    readme=readme,
                    repository=repository,
                    artifact=artifact,
                )
            )

        result.committed = self.reporter.progress(
            "Committing version", lambda: self.registry_client.commit(reservation, versions)
        )
        return result

    def abort(self, reservation: Reservation) -> None:
        """Release ``reservation``; failures are logged, never raised."""
        try:
            self.reporter.progress(
                "Aborting version", lambda: self.registry_client.abort(reservation)
            )
        except Exception as e:
            self._logger.warning("Failed to abort reservation %s: %s", reservation.id, e)
            self.reporter.warn("Failed to abort reservation %s: %s", reservation.id, e)

    def tag_and_push(
        self,
        vcs: IVCSHandler,
        repository: Repository,
        committed: list[AssetVersion],
        source: AssetSource,
    ) -> list[str]:
        """
        Tag the commit for every committed version and push, on main branches only.

        Failures are reported and swallowed; the versions are already published.
        """
        if not committed or not repository.main:
            return []

        multi_asset = len(source.definitions) > 1
        tags = [
            f"v{v.version}-{v.name}" if multi_asset else f"v{v.version}" for v in committed
        ]
        directory = str(self.directory)
        created: list[str] = []
        try:
            for tag in tags:
                self.reporter.info("Adding tag to %s: %s", vcs.name, tag)
                if vcs.tag(directory, tag):
                    created.append(tag)
            if created:
                self.reporter.progress(
                    "Pushing source code", lambda: vcs.push(directory, include_tags=True)
                )
            else:
                self.reporter.info("No changes to %s - not pushing source", vcs.name)
        except (BlockregException, OSError) as e:
            self._logger.warning("Tagging %s failed: %s", directory, e)
            self.reporter.warn("Failed to tag and push version control: %s", e)
        return created

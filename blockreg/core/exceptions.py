"""
Custom exception hierarchy for blockreg.

Every failure the publish pipeline can surface is one of these types, so the
CLI layer can render a message and pick an exit code without inspecting
strings.
"""

from __future__ import annotations


class BlockregException(Exception):
    """
    Base exception for all blockreg errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (file paths, URLs, etc.)
        exit_code: Suggested exit code for CLI (default: 1)
        recoverable: Whether retry/recovery may be possible
    """

    exit_code: int = 1
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Validation Errors
# =============================================================================


class BlockregValidationError(BlockregException, ValueError):
    """
    Base class for input validation errors.

    Inherits from ValueError so callers validating user input can catch either.
    """

    recoverable: bool = False


class DefinitionError(BlockregValidationError):
    """
    Malformed or incomplete asset definition file.

    Raised when the file is missing, is not a regular file, does not parse as
    YAML or lacks required metadata.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)
        self.file_path = file_path


class InvalidAssetUriError(BlockregValidationError):
    """Asset reference does not match ``handle/name[:version]``."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"Invalid asset uri: {uri}", context={"uri": uri})
        self.uri = uri


# =============================================================================
# Versioning Errors
# =============================================================================


class VersioningError(BlockregValidationError):
    """Base exception for all versioning-related errors."""

    pass


class VersionFormatError(VersioningError):
    """Raised when a version string has an invalid format."""

    def __init__(self, version_string: str, expected_format: str = "x.y.z") -> None:
        self.version_string = version_string
        self.expected_format = expected_format
        super().__init__(
            f"Invalid version format: '{version_string}'. Expected format: {expected_format}"
        )


class VersionIncrementError(VersioningError):
    """Manually assigned version is a smaller jump than the definition change requires."""

    def __init__(
        self,
        version: str,
        previous_version: str,
        actual: str,
        required: str,
    ) -> None:
        self.version = version
        self.previous_version = previous_version
        self.actual = actual
        self.required = required
        super().__init__(
            f"Version increment not allowed: {version}. {actual} detected and required "
            f"increment was {required} from {previous_version}"
        )


class VersionExistsError(VersioningError):
    """The same version with the same checksum is already registered."""

    def __init__(self, name: str, version: str, checksum: str) -> None:
        self.name = name
        self.version = version
        self.checksum = checksum
        super().__init__(
            f"Version already existed for checksum: {name}:{version} > {checksum}",
        )


class VersionConflictError(VersioningError):
    """The version is registered already with different content."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(
            f"Version {name}:{version} already exists with different content. "
            "Increase the version or enable auto-versioning."
        )


# =============================================================================
# Precondition Errors
# =============================================================================


class PreconditionError(BlockregException):
    """Base class for environment preconditions that are not met."""

    recoverable: bool = False


class WorkingDirectoryError(PreconditionError):
    """
    Working tree is dirty or behind its remote.

    Can be overridden by the caller with ``ignore_working_directory``.
    """

    def __init__(
        self,
        message: str,
        *,
        repo_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if repo_path:
            ctx["repo_path"] = repo_path
        super().__init__(message, context=ctx, cause=cause)


class ToolNotFoundError(PreconditionError):
    """A required external executable is not on PATH."""

    def __init__(self, tool: str, *, handler: str | None = None) -> None:
        ctx = {"tool": tool}
        if handler:
            ctx["handler"] = handler
        super().__init__(f"Required tool '{tool}' was not found on PATH", context=ctx)
        self.tool = tool


# =============================================================================
# Handler Errors
# =============================================================================


class HandlerNotFoundError(BlockregException):
    """No artifact handler matches a directory or a declared type."""

    recoverable: bool = False

    def __init__(self, message: str, *, artifact_type: str | None = None) -> None:
        ctx = {}
        if artifact_type:
            ctx["artifact_type"] = artifact_type
        super().__init__(message, context=ctx)
        self.artifact_type = artifact_type


class ArtifactError(BlockregException):
    """Base class for failures inside an artifact handler."""

    pass


class BuildError(ArtifactError):
    """Build step exited with an error."""

    def __init__(self, message: str = "Build failed", *, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)


class TestsFailedError(ArtifactError):
    """Test step exited with an error."""

    __test__ = False

    def __init__(self, message: str = "Tests failed", *, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)


class ProcessExecutionError(ArtifactError):
    """
    External command exited non-zero.

    Raised by the process runner; handlers wrap or propagate it.
    """

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        command: str | None = None,
        output: str = "",
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if exit_code is not None:
            ctx["exit_code"] = exit_code
        if command:
            ctx["command"] = command
        super().__init__(message, context=ctx, cause=cause)
        self.returncode = exit_code
        self.command = command
        self.output = output


# =============================================================================
# VCS Errors
# =============================================================================


class VCSError(BlockregException):
    """A version control operation failed."""

    def __init__(
        self,
        message: str,
        *,
        repo_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if repo_path:
            ctx["repo_path"] = repo_path
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Registry Errors
# =============================================================================


class RegistryError(BlockregException):
    """Base class for registry protocol errors."""

    pass


class RegistryConnectionError(RegistryError):
    """
    The registry could not be reached.

    The message names the configured URL so the user can fix their settings.
    """

    def __init__(self, url: str, *, cause: Exception | None = None) -> None:
        super().__init__(
            f"Failed to reach registry on {url}. Please check your settings and try again.",
            cause=cause,
        )
        self.url = url


class RegistryAPIError(RegistryError):
    """
    The registry returned an error response.

    Includes HTTP status code for programmatic handling.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if status_code:
            ctx["status_code"] = status_code
        if url:
            ctx["url"] = url
        super().__init__(message, context=ctx, cause=cause)
        self.status_code = status_code


class ReservationError(RegistryError):
    """The registry did not hand out a usable reservation."""

    pass


class AuthenticationError(RegistryError):
    """Credentials are missing or unreadable when a token is required."""

    recoverable: bool = False


# =============================================================================
# Dependency Errors
# =============================================================================


class DependencyResolutionError(BlockregException):
    """A ``local`` dependency could not be located or published."""

    def __init__(
        self,
        message: str,
        *,
        dependency: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if dependency:
            ctx["dependency"] = dependency
        super().__init__(message, context=ctx, cause=cause)
        self.dependency = dependency


class DependencyCycleError(DependencyResolutionError):
    """Local dependencies refer back to an asset that is still being published."""

    recoverable: bool = False

    def __init__(self, chain: list[str]) -> None:
        super().__init__(
            "Circular local dependency: " + " -> ".join(chain),
            dependency=chain[-1] if chain else None,
        )
        self.chain = chain

"""
NPM artifact handler.

Publishes the package under the asset's name and version. ``package.json``
is rewritten for the duration of ``npm publish`` and always restored.
"""

from __future__ import annotations

import contextlib
import json
import tarfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ...core.exceptions import ArtifactError, BuildError, ProcessExecutionError, TestsFailedError
from ...core.models.registry import Artifact
from .base import ArtifactHandler

PACKAGE_JSON = "package.json"


def npm_package_name(name: str) -> str:
    """``handle/name`` becomes the scoped package ``@handle/name``."""
    name = name.lower()
    return name if name.startswith("@") else f"@{name}"


@contextlib.contextmanager
def overridden_manifest(path: Path, **fields: Any) -> Iterator[dict[str, Any]]:
    """
    Temporarily merge ``fields`` into a JSON manifest.

    The original bytes are written back on exit, whether the body succeeded
    or raised.
    """
    original = path.read_bytes()
    try:
        manifest = json.loads(original)
        manifest.update(fields)
        path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        yield manifest
    finally:
        path.write_bytes(original)


class NpmArtifactHandler(ArtifactHandler):
    """NPM package handler."""

    artifact_type = "npm"
    display_name = "NPM"
    priority = 20
    required_tools = ("npm",)

    @classmethod
    def is_supported(cls, directory: str) -> bool:
        return (Path(directory) / PACKAGE_JSON).is_file()

    @property
    def registry_url(self) -> str | None:
        return self.config.npm.registry

    def _registry_args(self) -> list[str]:
        return ["--registry", self.registry_url] if self.registry_url else []

    def _manifest(self) -> dict[str, Any]:
        return json.loads((self.directory / PACKAGE_JSON).read_text(encoding="utf-8"))

    def _has_script(self, script: str) -> bool:
        return script in (self._manifest().get("scripts") or {})

    def calculate_checksum(self) -> str:
        """Hash of the files ``npm pack`` would include."""
        output = self.runner.output(["npm", "pack", "--dry-run", "--json"], self.directory)
        try:
            packs = json.loads(output)
        except ValueError as e:
            raise ArtifactError("Could not read npm pack output", cause=e) from e

        files = [
            self.directory / entry["path"]
            for pack in packs
            for entry in pack.get("files", [])
            if (self.directory / entry["path"]).is_file()
        ]
        return self.hash_files(files)

    def build(self) -> None:
        if not self._has_script("build"):
            self.reporter.debug("No build script in package.json")
            return
        try:
            self.runner.run(["npm", "run", "build"], self.directory)
        except ProcessExecutionError as e:
            raise BuildError(cause=e) from e

    def test(self) -> None:
        if not self._has_script("test"):
            self.reporter.debug("No test script in package.json")
            return
        try:
            self.runner.run(["npm", "test"], self.directory)
        except ProcessExecutionError as e:
            raise TestsFailedError(cause=e) from e

    def push(self, name: str, version: str, commit_id: str | None = None) -> Artifact:
        package = npm_package_name(name)
        with overridden_manifest(self.directory / PACKAGE_JSON, name=package, version=version):
            self.reporter.progress(
                f"Publishing NPM package {package}@{version}",
                lambda: self.runner.run(
                    ["npm", "publish", *self._registry_args()], self.directory
                ),
            )

        return Artifact(
            type=self.artifact_type,
            details={"name": package, "version": version, "registry": self.registry_url},
        )

    def pull(self, details: dict[str, Any], target_dir: str, registry_client: Any) -> None:
        """Download the package tarball and unpack it into ``target_dir``."""
        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)
        registry = details.get("registry")
        spec = f"{details['name']}@{details['version']}"
        args = ["npm", "pack", spec, "--pack-destination", str(target)]
        if registry:
            args += ["--registry", registry]

        output = self.reporter.progress(
            f"Pulling NPM package {spec}", lambda: self.runner.output(args, target)
        )
        tarball = target / output.splitlines()[-1].strip()
        try:
            _extract_package(tarball, target)
        finally:
            tarball.unlink(missing_ok=True)

    def install(self, source_path: str, target_path: str) -> None:
        super().install(source_path, target_path)
        self.reporter.progress(
            "Installing NPM dependencies",
            lambda: self.runner.run(["npm", "install", "--omit=dev"], target_path),
        )


def _extract_package(tarball: Path, target: Path) -> None:
    """Unpack an npm tarball, dropping its leading ``package/`` directory."""
    root = target.resolve()
    with tarfile.open(tarball, "r:gz") as archive:
        for member in archive.getmembers():
            if not (member.isfile() or member.isdir()):
                continue
            _, _, relative = member.name.partition("/")
            if not relative:
                continue
            destination = (root / relative).resolve()
            if root not in destination.parents:
                continue
            if member.isdir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            source = archive.extractfile(member)
            if source is None:
                continue
            with source, open(destination, "wb") as out:
                out.write(source.read())

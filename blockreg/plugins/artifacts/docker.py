"""
Docker artifact handler.

Builds the image from the asset's Dockerfile as ``<name>:local`` before
anything is reserved. Push tags it with the full, minor and major version
(plus the commit id) under the configured docker registry host and pushes
every tag.
"""

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Any

from ...core.exceptions import BuildError, ProcessExecutionError
from ...core.models.registry import Artifact
from ...services.publish.definitions import find_definition_file, read_definitions
from ...versioning.calculator import VersionInfo
from .base import ArtifactHandler, expand_files

DOCKERFILE = "Dockerfile"


def parse_dockerfile_sources(content: str) -> list[str]:
    """
    Source paths referenced by ``COPY`` and ``ADD`` instructions.

    Multi-stage copies (``--from=``) and remote ``ADD`` urls are skipped.
    """
    sources: list[str] = []
    # Join line continuations before splitting into instructions
    content = content.replace("\\\r\n", " ").replace("\\\n", " ")
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        instruction, _, rest = line.partition(" ")
        if instruction.upper() not in ("COPY", "ADD"):
            continue

        rest = rest.strip()
        if rest.startswith("["):
            try:
                args = json.loads(rest)
            except ValueError:
                continue
            flags: list[str] = []
        else:
            tokens = shlex.split(rest)
            flags = [t for t in tokens if t.startswith("--")]
            args = [t for t in tokens if not t.startswith("--")]

        if any(flag.startswith("--from") for flag in flags):
            continue
        for src in args[:-1]:
            if "://" in src:
                continue
            sources.append(src)
    return sources


class DockerArtifactHandler(ArtifactHandler):
    """Docker image handler."""

    artifact_type = "docker"
    display_name = "Docker"
    priority = 10
    required_tools = ("docker",)

    @classmethod
    def is_supported(cls, directory: str) -> bool:
        return (Path(directory) / DOCKERFILE).is_file()

    @property
    def registry_host(self) -> str:
        return (self.config.docker.registry or "").rstrip("/")

    def image_name(self, name: str) -> str:
        if self.registry_host:
            return f"{self.registry_host}/{name}".lower()
        return name.lower()

    @staticmethod
    def local_build_name(name: str) -> str:
        return f"{name}:local".lower()

    def primary_image(self, name: str, version: str) -> str:
        return f"{self.image_name(name)}:{version}"

    def docker_tags(self, name: str, version: str, commit_id: str | None = None) -> list[str]:
        """Full, minor and major version tags, plus the commit tag when known."""
        image = self.image_name(name)
        info = VersionInfo.parse(version)
        tags = [
            f"{image}:{info.to_full_version()}",
            f"{image}:{info.to_minor_version()}",
            f"{image}:{info.to_major_version()}",
        ]
        if commit_id:
            tags.append(f"{image}:{commit_id}")
        return tags

    def calculate_checksum(self) -> str:
        """Hash of the Dockerfile and everything it copies into the image."""
        dockerfile = self.directory / DOCKERFILE
        sources = parse_dockerfile_sources(dockerfile.read_text(encoding="utf-8"))
        files = set(expand_files(self.directory, sources))
        files.add(dockerfile)
        return self.hash_files(files)

    def asset_names(self) -> list[str]:
        """Names declared by the definition file in the asset directory."""
        path = find_definition_file(self.directory)
        if path is None:
            raise BuildError(f"No definition file found in {self.directory}")
        return [definition["metadata"]["name"] for definition in read_definitions(path)]

    def _build_image(self, name: str) -> str:
        local = self.local_build_name(name)
        self.reporter.progress(
            f"Building local docker image: {local}",
            lambda: self.runner.run(["docker", "build", "-t", local, "."], self.directory),
        )
        return local

    def build(self) -> None:
        """
        Build ``<name>:local`` for every asset in the definition file.

        Raises:
            BuildError: If docker fails to build an image
        """
        try:
            for name in self.asset_names():
                self._build_image(name)
        except ProcessExecutionError as e:
            raise BuildError(f"Docker build failed: {e.message}", cause=e) from e

    def test(self) -> None:
        self.reporter.debug("No tests defined for docker images")

    def push(self, name: str, version: str, commit_id: str | None = None) -> Artifact:
        local = self.local_build_name(name)

        tags = self.docker_tags(name, version, commit_id)

        def tag_all() -> None:
            for tag in tags:
                self.runner.run(["docker", "tag", local, tag], self.directory)

        self.reporter.progress("Tagging docker image", tag_all)
        for tag in tags:
            self.reporter.progress(
                f"Pushing docker image: {tag}",
                lambda tag=tag: self.runner.run(["docker", "push", tag], self.directory),
            )

        return Artifact(
            type=self.artifact_type,
            details={
                "name": self.image_name(name),
                "primary": self.primary_image(name, version),
                "tags": tags,
            },
        )

    def pull(self, details: dict[str, Any], target_dir: str, registry_client: Any) -> None:
        image = details["primary"]
        self.reporter.progress(
            f"Pulling docker image: {image}",
            lambda: self.runner.run(["docker", "pull", image]),
        )

    def install(self, source_path: str, target_path: str) -> None:
        # Images live in the docker daemon, nothing to copy
        self.reporter.debug("Docker image installed in local daemon")

"""
Maven artifact handler.

Deploys the project with its version set to the reserved version. The
``pom.xml`` is restored after ``mvn deploy`` regardless of the outcome.
"""

from __future__ import annotations

import contextlib
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ...core.exceptions import ArtifactError, BuildError, ProcessExecutionError, TestsFailedError
from ...core.models.registry import Artifact
from .base import ArtifactHandler, expand_files

POM_XML = "pom.xml"


def read_coordinates(pom: Path) -> tuple[str, str]:
    """
    ``(groupId, artifactId)`` of a pom, inheriting groupId from the parent.

    Raises:
        ArtifactError: If the pom cannot be parsed or lacks coordinates
    """
    try:
        root = ET.parse(pom).getroot()
    except ET.ParseError as e:
        raise ArtifactError(f"Failed to parse {pom}", cause=e) from e

    ns = root.tag[: root.tag.index("}") + 1] if root.tag.startswith("{") else ""

    def text(path: str) -> str | None:
        node = root.find("/".join(f"{ns}{part}" for part in path.split("/")))
        return node.text.strip() if node is not None and node.text else None

    group_id = text("groupId") or text("parent/groupId")
    artifact_id = text("artifactId")
    if not group_id or not artifact_id:
        raise ArtifactError(f"{pom} does not declare groupId and artifactId")
    return group_id, artifact_id


@contextlib.contextmanager
def preserved_file(path: Path) -> Iterator[None]:
    """Restore ``path`` to its current bytes on exit."""
    original = path.read_bytes()
    try:
        yield
    finally:
        path.write_bytes(original)


class MavenArtifactHandler(ArtifactHandler):
    """Maven package handler."""

    artifact_type = "maven"
    display_name = "Maven"
    priority = 30
    required_tools = ("mvn",)

    @classmethod
    def is_supported(cls, directory: str) -> bool:
        return (Path(directory) / POM_XML).is_file()

    @property
    def registry_url(self) -> str | None:
        return self.config.maven.registry

    def calculate_checksum(self) -> str:
        """Hash of the pom and the source tree."""
        files = expand_files(self.directory, [POM_XML, "src"])
        return self.hash_files(files)

    def build(self) -> None:
        try:
            self.runner.run(["mvn", "-B", "package", "-DskipTests"], self.directory)
        except ProcessExecutionError as e:
            raise BuildError(cause=e) from e

    def test(self) -> None:
        try:
            self.runner.run(["mvn", "-B", "test"], self.directory)
        except ProcessExecutionError as e:
            raise TestsFailedError(cause=e) from e

    def push(self, name: str, version: str, commit_id: str | None = None) -> Artifact:
        pom = self.directory / POM_XML
        group_id, artifact_id = read_coordinates(pom)

        deploy = ["mvn", "-B", "deploy", "-DskipTests"]
        if self.registry_url:
            deploy.append(f"-DaltDeploymentRepository=blockreg::default::{self.registry_url}")

        def publish() -> None:
            with preserved_file(pom):
                self.runner.run(
                    [
                        "mvn",
                        "-B",
                        "versions:set",
                        f"-DnewVersion={version}",
                        "-DgenerateBackupPoms=false",
                    ],
                    self.directory,
                )
                self.runner.run(deploy, self.directory)

        self.reporter.progress(f"Deploying {group_id}:{artifact_id}:{version}", publish)

        return Artifact(
            type=self.artifact_type,
            details={
                "groupId": group_id,
                "artifactId": artifact_id,
                "version": version,
                "registry": self.registry_url,
            },
        )

    def pull(self, details: dict[str, Any], target_dir: str, registry_client: Any) -> None:
        Path(target_dir).mkdir(parents=True, exist_ok=True)
        coordinates = f"{details['groupId']}:{details['artifactId']}:{details['version']}"
        args = [
            "mvn",
            "-B",
            "dependency:copy",
            f"-Dartifact={coordinates}",
            f"-DoutputDirectory={target_dir}",
        ]
        if details.get("registry"):
            args.append(f"-DremoteRepositories=blockreg::default::{details['registry']}")
        self.reporter.progress(
            f"Pulling maven artifact {coordinates}", lambda: self.runner.run(args, target_dir)
        )

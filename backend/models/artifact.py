"""Artifact data models produced from model replies"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, model_validator

from .diff import DiffResult


class ArtifactKind(str, Enum):
    """How an artifact should be placed"""

    INLINE = "inline"
    FILE = "file"


class Artifact(BaseModel):
    """One unit of extracted output"""

    path: str | None = None
    content: str
    kind: ArtifactKind = ArtifactKind.INLINE

    @model_validator(mode="after")
    def _check_path(self) -> "Artifact":
        if self.kind == ArtifactKind.FILE and not self.path:
            raise ValueError("file artifacts require a non-empty path")
        if self.kind == ArtifactKind.INLINE and self.path is not None:
            raise ValueError("inline artifacts cannot carry a path")
        return self


class ExtractionResult(BaseModel):
    """Artifacts found in one reply, in the order they appeared"""

    artifacts: list[Artifact] = []
    any_found: bool = False

    @property
    def files(self) -> list[Artifact]:
        return [a for a in self.artifacts if a.kind == ArtifactKind.FILE]

    @property
    def inline(self) -> Artifact | None:
        for artifact in self.artifacts:
            if artifact.kind == ArtifactKind.INLINE:
                return artifact
        return None


class ApplyOutcome(BaseModel):
    """Result of applying one artifact to the workspace"""

    path: str | None = None
    success: bool
    message: str
    diff: DiffResult | None = None

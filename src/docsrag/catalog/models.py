"""Collection descriptors produced by a catalog scan."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any


class CollectionKind(StrEnum):
    """How a top-level storage entry was classified."""

    GIT_REPOSITORY = "git_repository"
    TEXT_FILE = "text_file"


@dataclass(frozen=True, slots=True)
class CollectionDescriptor:
    """A collection found on disk.

    ``source_path`` is the repository directory for GIT_REPOSITORY and the
    index file itself for TEXT_FILE. Recomputed on every scan.
    """

    id: str
    display_name: str
    source_path: Path
    kind: CollectionKind
    description: str

    @classmethod
    def for_entry(cls, name: str, source_path: Path, kind: CollectionKind) -> CollectionDescriptor:
        if kind is CollectionKind.GIT_REPOSITORY:
            description = f"Git repository: {name}"
        else:
            description = f"Text document: {name}"
        return cls(
            id=name,
            display_name=name,
            source_path=source_path,
            kind=kind,
            description=description,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "path": str(self.source_path),
            "kind": self.kind.value,
            "description": self.description,
        }

"""Materialize a collection into LogicalDocuments.

Pure filesystem I/O. Read failures are skipped with a warning and never
abort the load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from docsrag.catalog.models import CollectionDescriptor, CollectionKind
from docsrag.config.constants import RESERVED_PREFIX
from docsrag.index.models import LogicalDocument

log = structlog.get_logger(__name__)


@dataclass
class LoadResult:
    """Documents plus the paths that could not be read."""

    documents: list[LogicalDocument]
    skipped: list[str] = field(default_factory=list)
    placeholder: bool = False


def placeholder_document(descriptor: CollectionDescriptor) -> LogicalDocument:
    """Stand-in for a collection with no readable files."""
    return LogicalDocument(
        text=(
            f"The document collection '{descriptor.id}' appears to be empty. "
            f"No readable files were found at {descriptor.source_path}."
        ),
        metadata={"name": descriptor.id, "source_path": str(descriptor.source_path)},
    )


class ContentLoader:
    """Loads collection content relative to a storage root."""

    def __init__(self, docs_path: Path) -> None:
        self._docs_path = docs_path.resolve()

    def load(self, descriptor: CollectionDescriptor) -> list[LogicalDocument]:
        return self.load_with_report(descriptor).documents

    def load_with_report(self, descriptor: CollectionDescriptor) -> LoadResult:
        if descriptor.kind is CollectionKind.TEXT_FILE:
            result = self._load_file(descriptor)
        else:
            result = self._load_tree(descriptor)

        if not result.documents:
            result.documents.append(placeholder_document(descriptor))
            result.placeholder = True
            log.warning(
                "loader.empty_collection",
                collection=descriptor.id,
                path=str(descriptor.source_path),
            )

        log.info(
            "loader.loaded",
            collection=descriptor.id,
            documents=len(result.documents),
            skipped=len(result.skipped),
        )
        return result

    def _load_file(self, descriptor: CollectionDescriptor) -> LoadResult:
        result = LoadResult(documents=[])
        text = self._read(descriptor.source_path, result)
        if text is not None:
            result.documents.append(
                LogicalDocument(
                    text=text,
                    metadata={
                        "name": descriptor.id,
                        "source_path": str(descriptor.source_path),
                    },
                )
            )
        return result

    def _load_tree(self, descriptor: CollectionDescriptor) -> LoadResult:
        result = LoadResult(documents=[])
        self._walk(descriptor.source_path, result)
        return result

    def _walk(self, directory: Path, result: LoadResult) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            log.warning("loader.dir_unreadable", path=str(directory), error=str(e))
            result.skipped.append(str(directory))
            return

        for entry in entries:
            if entry.name.startswith(RESERVED_PREFIX):
                continue
            try:
                # Symlinks are not followed to avoid cycles
                if entry.is_symlink():
                    continue
                is_dir = entry.is_dir()
                is_file = entry.is_file()
            except OSError:
                result.skipped.append(str(entry))
                continue

            if is_dir:
                self._walk(entry, result)
            elif is_file:
                text = self._read(entry, result)
                if text is None:
                    continue
                result.documents.append(
                    LogicalDocument(
                        text=text,
                        metadata={
                            "name": entry.name,
                            "source_path": str(entry),
                            "relative_path": self._relative(entry),
                        },
                    )
                )

    def _read(self, path: Path, result: LoadResult) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.warning("loader.file_skipped", path=str(path), error=str(e))
            result.skipped.append(str(path))
            return None

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self._docs_path).as_posix()
        except ValueError:
            return path.as_posix()

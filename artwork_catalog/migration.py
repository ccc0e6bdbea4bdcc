"""
One-way copy of a local artworks folder into the configured backend.

Files already present at the destination are skipped, so the copy can be
re-run after an interruption.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .errors import CatalogError
from .storage import AssetBackend, FilesystemBackend, content_type_for

logger = logging.getLogger(__name__)


class MigrationStatus(str, Enum):
    SKIPPED = "SKIP"
    UPLOADED = "OK"
    PLANNED = "DRY-RUN"
    FAILED = "ERROR"


@dataclass
class MigrationResult:
    artwork_id: str
    filename: str
    status: MigrationStatus
    detail: str = ""


@dataclass
class MigrationReport:
    results: List[MigrationResult] = field(default_factory=list)

    def _count(self, status: MigrationStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def uploaded(self) -> int:
        return self._count(MigrationStatus.UPLOADED)

    @property
    def skipped(self) -> int:
        return self._count(MigrationStatus.SKIPPED)

    @property
    def planned(self) -> int:
        return self._count(MigrationStatus.PLANNED)

    @property
    def failed(self) -> int:
        return self._count(MigrationStatus.FAILED)


def _copy_one(
    source: AssetBackend,
    target: AssetBackend,
    artwork_id: str,
    filename: str,
    dry_run: bool,
) -> MigrationResult:
    try:
        if target.has_file(artwork_id, filename):
            return MigrationResult(
                artwork_id, filename, MigrationStatus.SKIPPED, "already exists"
            )
        if dry_run:
            return MigrationResult(artwork_id, filename, MigrationStatus.PLANNED)
        data = source.read_file(artwork_id, filename)
        target.write_file(artwork_id, filename, data, content_type_for(filename))
    except CatalogError as e:
        logger.warning(f"Failed to migrate {artwork_id}/{filename}: {e.message}")
        return MigrationResult(artwork_id, filename, MigrationStatus.FAILED, e.message)
    return MigrationResult(artwork_id, filename, MigrationStatus.UPLOADED)


def migrate_directory(
    source_dir: str,
    target: AssetBackend,
    dry_run: bool = False,
    on_result: Optional[Callable[[MigrationResult], None]] = None,
) -> MigrationReport:
    """Copy every file of every artwork folder under ``source_dir``.

    Args:
        source_dir: Local folder holding one subfolder per artwork
        target: Destination backend, usually the object store
        dry_run: Report what would be copied without writing anything
        on_result: Called with each file's result as soon as it is known

    Raises:
        BackendError: If ``source_dir`` cannot be listed
    """
    source = FilesystemBackend(source_dir)
    report = MigrationReport()

    for artwork_id in source.list_identifiers():
        try:
            filenames = source.list_files(artwork_id)
        except CatalogError as e:
            logger.warning(f"Skipping unreadable artwork folder {artwork_id}: {e.message}")
            continue

        for filename in filenames:
            result = _copy_one(source, target, artwork_id, filename, dry_run)
            report.results.append(result)
            if on_result is not None:
                on_result(result)

    return report

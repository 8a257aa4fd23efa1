"""Copy image and video files into the new post bundle."""

from __future__ import annotations

import enum
import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from migration.rewriter import CopyTask

logger = logging.getLogger("migration")

DEFAULT_ASSET_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".mp4"})


class CopyOutcome(enum.Enum):
    COPIED = "copied"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class RelocationReport:
    copied: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    def record(self, outcome: CopyOutcome, src: Path) -> None:
        if outcome is CopyOutcome.COPIED:
            self.copied.append(src)
        else:
            self.failed.append(src)

    def merge(self, other: RelocationReport) -> None:
        self.copied.extend(other.copied)
        self.failed.extend(other.failed)


def is_asset(path: PurePosixPath | Path, extensions: Iterable[str]) -> bool:
    return path.suffix.lower() in set(extensions)


def copy_file(src: Path, dest: Path) -> CopyOutcome:
    """Copy one file, creating ``dest``'s parents. Never raises."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
    except FileNotFoundError as exc:
        logger.warning("Failed to copy %s to %s: %s", src, dest, exc)
        return CopyOutcome.NOT_FOUND
    except OSError as exc:
        logger.warning("Failed to copy %s to %s: %s", src, dest, exc)
        return CopyOutcome.FAILED
    logger.debug("Copied %s to %s", src, dest)
    return CopyOutcome.COPIED


def mirror_assets(
    src_dir: Path,
    dest_dir: Path,
    extensions: Iterable[str] = DEFAULT_ASSET_EXTENSIONS,
) -> RelocationReport:
    """Recursively copy asset files from ``src_dir`` into ``dest_dir``.

    Every subdirectory is recreated; files whose extension is not in
    ``extensions`` are skipped. A failed file does not stop the walk.
    """
    extensions = {ext.lower() for ext in extensions}
    report = RelocationReport()
    try:
        entries = sorted(src_dir.iterdir())
    except FileNotFoundError:
        return report
    except OSError as exc:
        logger.warning("Error accessing directory %s: %s", src_dir, exc)
        return report

    dest_dir.mkdir(parents=True, exist_ok=True)
    for entry in entries:
        target = dest_dir / entry.name
        if entry.is_dir():
            report.merge(mirror_assets(entry, target, extensions))
        elif is_asset(entry, extensions):
            report.record(copy_file(entry, target), entry)
    return report


def run_copy_tasks(
    tasks: Iterable[CopyTask],
    images_root: Path,
    post_dir: Path,
    extensions: Iterable[str] = DEFAULT_ASSET_EXTENSIONS,
    source_name: str = "<text>",
) -> RelocationReport:
    """Copy individually referenced images that live outside the post's own directory."""
    extensions = {ext.lower() for ext in extensions}
    report = RelocationReport()
    for task in tasks:
        if not is_asset(PurePosixPath(task.destination), extensions):
            logger.debug("%s: not an image or video, skipping %s", source_name, task.destination)
            continue
        src = images_root.joinpath(*PurePosixPath(task.source).parts)
        dest = post_dir.joinpath(*PurePosixPath(task.destination).parts)
        logger.debug("%s: copying referenced image %s to %s", source_name, src, dest)
        report.record(copy_file(src, dest), src)
    return report

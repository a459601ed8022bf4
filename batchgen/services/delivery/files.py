"""Saving generated copies to disk and cleaning up old ones.

Only files whose names match ``GENERATED_FILE_PATTERN`` are ever listed or
deleted, so the output directory can safely hold other files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from batchgen.core.logging import get_logger
from batchgen.services.generation.naming import is_generated_filename
from batchgen.services.generation.orchestrator import GeneratedCopy

logger = get_logger(__name__)

PathLike = Union[str, Path]


def save_copies(copies: Iterable[GeneratedCopy], directory: PathLike) -> List[Path]:
    """Write each copy to *directory* (created if needed)."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for generated in copies:
        path = target / generated.filename
        path.write_bytes(generated.content)
        written.append(path)

    logger.info("Saved %d generated files to %s", len(written), target)
    return written


def list_generated_files(directory: PathLike) -> List[Path]:
    """Generated files anywhere below *directory*, sorted by path."""
    root = Path(directory)
    if not root.is_dir():
        return []
    return sorted(
        p for p in root.rglob("*") if p.is_file() and is_generated_filename(p.name)
    )


def cleanup_generated_files(directory: PathLike) -> int:
    """Delete generated files directly inside *directory*; returns how many."""
    root = Path(directory)
    if not root.is_dir():
        return 0

    deleted = 0
    for path in root.iterdir():
        if not (path.is_file() and is_generated_filename(path.name)):
            continue
        try:
            path.unlink()
            deleted += 1
        except OSError as exc:
            logger.warning("Failed to delete old generated file %s: %s", path.name, exc)

    logger.info("Cleanup removed %d generated files from %s", deleted, root)
    return deleted

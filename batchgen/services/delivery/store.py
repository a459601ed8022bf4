"""Single-use in-memory store for generated archives.

An archive is kept until it is downloaded once, or until the store is full
and it is the oldest entry.  Uses a plain dict guarded by a lock; a
multi-process deployment would need a shared store instead.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Optional

from batchgen.core.config import settings
from batchgen.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredArchive:
    name: str
    content: bytes


_archives: dict[str, StoredArchive] = {}
_lock = threading.Lock()


def store_archive(name: str, content: bytes, capacity: Optional[int] = None) -> str:
    """Keep an archive for later download and return its download id."""
    capacity = capacity or settings.archive_store_capacity
    download_id = str(uuid.uuid4())
    with _lock:
        while len(_archives) >= capacity:
            # dicts keep insertion order, so the first key is the oldest
            evicted = next(iter(_archives))
            del _archives[evicted]
            logger.info("Archive store full, evicted %s", evicted)
        _archives[download_id] = StoredArchive(name=name, content=content)
    logger.info("Archive stored: id=%s name=%s size=%d", download_id, name, len(content))
    return download_id


def take_archive(download_id: str) -> Optional[StoredArchive]:
    """Remove and return an archive.  Returns None if unknown or already taken."""
    with _lock:
        return _archives.pop(download_id, None)


def pending_count() -> int:
    with _lock:
        return len(_archives)


def clear_archives() -> None:
    with _lock:
        _archives.clear()

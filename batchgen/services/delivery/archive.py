"""In-memory zip packaging of generated copies."""

from __future__ import annotations

import io
import zipfile
from typing import Iterable

from batchgen.core.logging import get_logger
from batchgen.services.generation.orchestrator import GeneratedCopy

logger = get_logger(__name__)


def build_archive(copies: Iterable[GeneratedCopy]) -> bytes:
    """Zip every copy under its generated filename."""
    buffer = io.BytesIO()
    count = 0
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for generated in copies:
            zf.writestr(generated.filename, generated.content)
            count += 1

    content = buffer.getvalue()
    logger.info("Archive built: entries=%d size=%d", count, len(content))
    return content

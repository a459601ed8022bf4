"""Tests for zip packaging and the single-use archive store."""

from __future__ import annotations

import io
import zipfile
from decimal import Decimal

from batchgen.services.delivery.archive import build_archive
from batchgen.services.delivery.store import (
    pending_count,
    store_archive,
    take_archive,
)
from batchgen.services.generation.orchestrator import GeneratedCopy


def _copy(index: int, content: bytes = b"<Document/>") -> GeneratedCopy:
    return GeneratedCopy(
        copy_index=index,
        filename=f"PAIN1V3_SDSC_20250102030405678_F{index + 1}.xml",
        content=content,
        message_id=f"20250102030405{index:03d}",
        transaction_count=1,
        control_sum=Decimal("1.00"),
    )


class TestBuildArchive:
    def test_entries_in_copy_order(self):
        copies = [_copy(0, b"<a/>"), _copy(1, b"<b/>")]
        content = build_archive(copies)

        with zipfile.ZipFile(io.BytesIO(content)) as zf:
            assert zf.namelist() == [c.filename for c in copies]
            assert zf.read(copies[1].filename) == b"<b/>"
            assert zf.testzip() is None

    def test_empty_archive_is_valid(self):
        with zipfile.ZipFile(io.BytesIO(build_archive([]))) as zf:
            assert zf.namelist() == []


class TestArchiveStore:
    def test_take_is_single_use(self):
        download_id = store_archive("a.zip", b"zip-bytes")

        archive = take_archive(download_id)
        assert archive is not None
        assert archive.name == "a.zip"
        assert archive.content == b"zip-bytes"
        assert take_archive(download_id) is None

    def test_unknown_id(self):
        assert take_archive("missing") is None

    def test_ids_are_unique(self):
        ids = {store_archive("a.zip", b"x") for _ in range(5)}
        assert len(ids) == 5
        assert pending_count() == 5

    def test_oldest_evicted_at_capacity(self):
        first = store_archive("1.zip", b"1", capacity=2)
        second = store_archive("2.zip", b"2", capacity=2)
        third = store_archive("3.zip", b"3", capacity=2)

        assert pending_count() == 2
        assert take_archive(first) is None
        assert take_archive(second).name == "2.zip"
        assert take_archive(third).name == "3.zip"

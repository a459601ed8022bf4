"""Tests for file naming, classification codes and message ids."""

from __future__ import annotations

import random
from datetime import datetime

import pytest

from batchgen.services.generation.naming import (
    archive_filename,
    batch_identifier,
    classification_code,
    compact_millis,
    copy_filename,
    creation_datetime,
    is_generated_filename,
    iso_date,
    mint_message_id,
    mint_message_ids,
    transaction_identifier,
)

INSTANT = datetime(2025, 7, 21, 12, 34, 56, 789000)


class TestClassificationCode:
    @pytest.mark.parametrize(
        "num_batches, num_transactions, expected",
        [
            (1, 1, "SDSC"),
            (1, 5, "SDMC"),
            (3, 3, "MSDSC"),
            (2, 5, "MDMC"),
        ],
    )
    def test_table(self, num_batches, num_transactions, expected):
        assert classification_code(num_transactions, num_batches) == expected


class TestTimestamps:
    def test_compact_millis_is_17_digits(self):
        assert compact_millis(INSTANT) == "20250721123456789"

    def test_compact_millis_pads_milliseconds(self):
        assert compact_millis(datetime(2025, 1, 1, 0, 0, 0, 5000)) == "20250101000000005"

    def test_creation_and_execution_formats(self):
        assert creation_datetime(INSTANT) == "2025-07-21T12:34:56"
        assert iso_date(INSTANT) == "2025-07-21"


class TestFilenames:
    def test_copy_filename(self):
        name = copy_filename("PAIN1V3", "SDMC", INSTANT, 0)
        assert name == "PAIN1V3_SDMC_20250721123456789_F1.xml"
        assert is_generated_filename(name)

    @pytest.mark.parametrize("shape", ["SDSC", "SDMC", "MSDSC", "MDMC"])
    def test_every_classification_code_matches_pattern(self, shape):
        assert is_generated_filename(copy_filename("PACS8V2", shape, INSTANT, 9))

    @pytest.mark.parametrize(
        "name",
        [
            "notes.txt",
            "PAIN1V3_SDMC_2025072112345678_F1.xml",  # 16-digit timestamp
            "FOO1V3_SDMC_20250721123456789_F1.xml",
            "PAIN1V3_sdmc_20250721123456789_F1.xml",
            "PAIN1V3_SDMC_20250721123456789_F1.zip",
        ],
    )
    def test_foreign_names_do_not_match(self, name):
        assert not is_generated_filename(name)

    def test_archive_filename(self):
        assert archive_filename("PAIN8V2", "MDMC", INSTANT) == "PAIN8V2_MDMC_20250721123456.zip"


class TestMessageIds:
    def test_message_id_shape(self):
        msg_id = mint_message_id(INSTANT, random.Random(1))
        assert msg_id.startswith("20250721123456")
        assert len(msg_id) == 17
        assert msg_id.isdigit()

    def test_ids_for_one_job_are_distinct(self):
        ids = mint_message_ids(INSTANT, 10, random.Random(7))
        assert len(ids) == 10
        assert len(set(ids)) == 10
        assert all(len(i) == 17 for i in ids)

    def test_suffix_widens_past_one_thousand_copies(self):
        ids = mint_message_ids(INSTANT, 1500, random.Random(7))
        assert len(set(ids)) == 1500
        assert all(len(i) == 18 for i in ids)

    def test_derived_identifiers(self):
        assert batch_identifier("M", 0) == "MB1"
        assert transaction_identifier("M", 1, 4) == "MB2T5"

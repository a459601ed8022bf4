"""File naming, classification codes, message ids and timestamp formats.

Every formatter here is a pure function of the instant it is given; callers
decide what "now" is, so workers never share formatter state.
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import List, Optional

# <TypeCode>_<Classification>_<yyyyMMddHHmmssSSS>_F<n>.xml
# e.g. PAIN1V3_SDMC_20250721123456789_F1.xml
# The classification segment allows 5 letters so that MSDSC names match too.
GENERATED_FILE_PATTERN = re.compile(
    r"^(PAIN|PACS|CAMT)\d+V\d+_[A-Z]{4,5}_\d{17}_F\d+\.xml$"
)

MESSAGE_ID_SUFFIX_DIGITS = 3


def classification_code(num_transactions: int, num_batches: int) -> str:
    """Summarise the batch/transaction shape of a job.

    ==========  ===============  =====
    batches     transactions     code
    ==========  ===============  =====
    1           1                SDSC
    1           >1               SDMC
    >1          == batches       MSDSC
    >1          != batches       MDMC
    ==========  ===============  =====
    """
    if num_batches == 1:
        return "SDSC" if num_transactions == 1 else "SDMC"
    if num_batches == num_transactions:
        return "MSDSC"
    return "MDMC"


def compact_seconds(instant: datetime) -> str:
    """``yyyyMMddHHmmss``."""
    return instant.strftime("%Y%m%d%H%M%S")


def compact_millis(instant: datetime) -> str:
    """``yyyyMMddHHmmssSSS`` (17 digits)."""
    return instant.strftime("%Y%m%d%H%M%S") + f"{instant.microsecond // 1000:03d}"


def creation_datetime(instant: datetime) -> str:
    """ISO date-time for ``CreDtTm``."""
    return instant.strftime("%Y-%m-%dT%H:%M:%S")


def iso_date(instant: datetime) -> str:
    """ISO date for execution/collection/settlement dates."""
    return instant.strftime("%Y-%m-%d")


def mint_message_id(
    instant: datetime, rng: Optional[random.Random] = None
) -> str:
    """Second-precision timestamp followed by a 3-digit random suffix."""
    rng = rng or random.Random()
    suffix = rng.randrange(10**MESSAGE_ID_SUFFIX_DIGITS)
    return f"{compact_seconds(instant)}{suffix:0{MESSAGE_ID_SUFFIX_DIGITS}d}"


def mint_message_ids(
    instant: datetime, count: int, rng: Optional[random.Random] = None
) -> List[str]:
    """Mint *count* pairwise distinct message ids for one job.

    Suffixes are drawn without replacement.  The suffix widens beyond three
    digits only when a job asks for more than 1000 copies.
    """
    rng = rng or random.Random()
    digits = max(MESSAGE_ID_SUFFIX_DIGITS, len(str(count - 1)))
    prefix = compact_seconds(instant)
    return [
        f"{prefix}{suffix:0{digits}d}"
        for suffix in rng.sample(range(10**digits), count)
    ]


def batch_identifier(message_id: str, batch_index: int) -> str:
    """0-based batch index -> ``{msgId}B{n}``."""
    return f"{message_id}B{batch_index + 1}"


def transaction_identifier(
    message_id: str, batch_index: int, transaction_index: int
) -> str:
    """0-based indexes -> ``{msgId}B{n}T{m}``."""
    return f"{batch_identifier(message_id, batch_index)}T{transaction_index + 1}"


def copy_filename(
    type_code: str, classification: str, instant: datetime, copy_index: int
) -> str:
    """Name of one generated copy; *copy_index* is 0-based."""
    return f"{type_code}_{classification}_{compact_millis(instant)}_F{copy_index + 1}.xml"


def archive_filename(type_code: str, classification: str, instant: datetime) -> str:
    return f"{type_code}_{classification}_{compact_seconds(instant)}.zip"


def is_generated_filename(name: str) -> bool:
    return GENERATED_FILE_PATTERN.match(name) is not None

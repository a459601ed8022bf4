"""Message type classification.

Derives a short type code such as ``PAIN1V3`` from the namespace of the
message wrapper (the first element under ``<Document>``) and picks the
matching ``SchemaProfile``.  Unrecognised templates degrade to the default
profile with a diagnostic instead of aborting the job.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from batchgen.core.logging import get_logger
from batchgen.schemas.generation import Diagnostic, DiagnosticKind
from batchgen.services.generation.fields import local_name, namespace_of
from batchgen.services.generation.profiles import (
    DEFAULT_PROFILE,
    SchemaProfile,
    get_profile,
)

logger = get_logger(__name__)

UNKNOWN_TYPE_CODE = "UNKNOWN"

# Used when the wrapper carries no usable namespace
_LOCAL_NAME_CODES: dict[str, str] = {
    "CstmrCdtTrfInitn": "PAIN1V3",
    "CstmrPmtRvsl": "PAIN7V2",
    "CstmrDrctDbtInitn": "PAIN8V2",
    "FIToFICstmrCdtTrf": "PACS8V2",
    "BkToCstmrStmt": "CAMT53V2",
}

_NAMEABLE_CODE = re.compile(r"^(PAIN|PACS|CAMT)\d+V\d+$")


class ClassificationOutcome(str, Enum):
    RECOGNIZED = "recognized"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Classification:
    """Result of inspecting a template.

    Attributes:
        outcome: RECOGNIZED when ``code`` has a registered profile.
        code: Code derived from the template, or ``UNKNOWN``.
        profile: Profile to replicate with (the default one when unknown).
        diagnostic: Set when the default profile was substituted.
    """

    outcome: ClassificationOutcome
    code: str
    profile: SchemaProfile
    diagnostic: Optional[Diagnostic] = None

    @property
    def recognized(self) -> bool:
        return self.outcome is ClassificationOutcome.RECOGNIZED

    @property
    def type_code(self) -> str:
        """Code used in generated file names."""
        if _NAMEABLE_CODE.match(self.code):
            return self.code
        return self.profile.type_code


def message_wrapper(root: ET.Element) -> Optional[ET.Element]:
    """Return the first element child of the document root."""
    for child in root:
        if isinstance(child.tag, str):
            return child
    return None


def type_code_from_namespace(namespace: Optional[str]) -> Optional[str]:
    """``urn:iso:std:iso:20022:tech:xsd:pain.001.001.03`` -> ``PAIN1V3``.

    Returns None when the namespace does not follow that shape.
    """
    if not namespace:
        return None
    parts = namespace.split(":")[-1].split(".")
    if len(parts) < 4:
        return None
    try:
        major = int(parts[1])
        minor = int(parts[3])
    except ValueError:
        return None
    return f"{parts[0].upper()}{major}V{minor}"


def detect_type_code(root: ET.Element) -> str:
    """Derive the type code of a parsed template, or ``UNKNOWN``."""
    wrapper = message_wrapper(root)
    if wrapper is None:
        return UNKNOWN_TYPE_CODE

    code = type_code_from_namespace(namespace_of(wrapper.tag))
    if code:
        return code
    return _LOCAL_NAME_CODES.get(local_name(wrapper.tag), UNKNOWN_TYPE_CODE)


def classify(root: ET.Element) -> Classification:
    """Select the schema profile for a parsed template."""
    code = detect_type_code(root)
    profile = get_profile(code)
    if profile is not None:
        logger.info("Detected message type: %s", code)
        return Classification(
            outcome=ClassificationOutcome.RECOGNIZED,
            code=code,
            profile=profile,
        )

    message = (
        f"Unknown message type {code}; using default "
        f"{DEFAULT_PROFILE.type_code} tag names"
    )
    logger.warning(message)
    return Classification(
        outcome=ClassificationOutcome.UNKNOWN,
        code=code,
        profile=DEFAULT_PROFILE,
        diagnostic=Diagnostic(kind=DiagnosticKind.UNKNOWN_MESSAGE_TYPE, message=message),
    )

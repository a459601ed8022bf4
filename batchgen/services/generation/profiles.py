"""Schema profile registry.

A ``SchemaProfile`` describes where one ISO 20022 message family keeps its
batches, transactions, identifiers, amounts and aggregate fields.  The
replicator is driven entirely by these records, so supporting a new family
or version means adding one entry to ``PROFILES``.

Tag names are element *local* names; lookups ignore namespaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MessageFamily(str, Enum):
    CREDIT_TRANSFER_INITIATION = "pain.001"
    PAYMENT_REVERSAL = "pain.007"
    DIRECT_DEBIT_INITIATION = "pain.008"
    INTERBANK_CREDIT_TRANSFER = "pacs.008"
    BANK_STATEMENT = "camt.053"


@dataclass(frozen=True)
class SchemaProfile:
    """Immutable tag-name mapping for one message family/version.

    Attributes:
        type_code: Short type code, e.g. ``PAIN1V3``.
        family: The message family this profile belongs to.
        batch_tag: Element replicated once per batch.
        transaction_tag: Element replicated once per transaction.
        batch_id_tag: Batch identifier, set to ``{msgId}B{n}``.
        batch_count_tag: Per-batch transaction count, written if present.
        batch_sum_tag: Per-batch control sum, written if present.
        transaction_id_tags: One to three identifier fields per transaction.
        amount_tag: Field holding the transaction amount.
        amount_fallback_path: Nested local-name path searched when
            ``amount_tag`` is not found directly.
        header_tag: Group header holding document-level aggregates.
        document_count_tag: Document-level transaction count.
        document_sum_tags: Document-level sum fields.
        execution_date_tag: Requested execution/collection/settlement date.
    """

    type_code: str
    family: MessageFamily
    batch_tag: str
    transaction_tag: str
    transaction_id_tags: tuple[str, ...]
    amount_tag: str
    batch_id_tag: Optional[str] = None
    batch_count_tag: Optional[str] = None
    batch_sum_tag: Optional[str] = None
    amount_fallback_path: tuple[str, ...] = ()
    header_tag: str = "GrpHdr"
    document_count_tag: str = "NbOfTxs"
    document_sum_tags: tuple[str, ...] = ("CtrlSum",)
    execution_date_tag: Optional[str] = None

    def __post_init__(self) -> None:
        if not 1 <= len(self.transaction_id_tags) <= 3:
            raise ValueError(
                f"{self.type_code}: expected 1-3 transaction id tags, "
                f"got {len(self.transaction_id_tags)}"
            )


def _credit_transfer_initiation(type_code: str) -> SchemaProfile:
    return SchemaProfile(
        type_code=type_code,
        family=MessageFamily.CREDIT_TRANSFER_INITIATION,
        batch_tag="PmtInf",
        transaction_tag="CdtTrfTxInf",
        batch_id_tag="PmtInfId",
        batch_count_tag="NbOfTxs",
        batch_sum_tag="CtrlSum",
        transaction_id_tags=("EndToEndId", "InstrId"),
        amount_tag="InstdAmt",
        execution_date_tag="ReqdExctnDt",
    )


PAIN1V3 = _credit_transfer_initiation("PAIN1V3")
PAIN1V9 = _credit_transfer_initiation("PAIN1V9")

PAIN7V2 = SchemaProfile(
    type_code="PAIN7V2",
    family=MessageFamily.PAYMENT_REVERSAL,
    batch_tag="OrgnlPmtInfAndRvsl",
    transaction_tag="TxInf",
    batch_id_tag="RvslPmtInfId",
    batch_count_tag="OrgnlNbOfTxs",
    batch_sum_tag="OrgnlCtrlSum",
    transaction_id_tags=("RvslId", "OrgnlInstrId"),
    amount_tag="OrgnlInstdAmt",
    amount_fallback_path=("OrgnlTxRef", "InstdAmt"),
)

PAIN8V2 = SchemaProfile(
    type_code="PAIN8V2",
    family=MessageFamily.DIRECT_DEBIT_INITIATION,
    batch_tag="PmtInf",
    transaction_tag="DrctDbtTxInf",
    batch_id_tag="PmtInfId",
    batch_count_tag="NbOfTxs",
    batch_sum_tag="CtrlSum",
    transaction_id_tags=("EndToEndId",),
    amount_tag="InstdAmt",
    execution_date_tag="ReqdColltnDt",
)

# pacs.008 has no repeating batch element: the message wrapper itself is
# replicated and the aggregates live only in the group header.
PACS8V2 = SchemaProfile(
    type_code="PACS8V2",
    family=MessageFamily.INTERBANK_CREDIT_TRANSFER,
    batch_tag="FIToFICstmrCdtTrf",
    transaction_tag="CdtTrfTxInf",
    transaction_id_tags=("EndToEndId", "InstrId", "TxId"),
    amount_tag="IntrBkSttlmAmt",
    document_sum_tags=("CtrlSum", "TtlIntrBkSttlmAmt"),
    execution_date_tag="IntrBkSttlmDt",
)

CAMT53V2 = SchemaProfile(
    type_code="CAMT53V2",
    family=MessageFamily.BANK_STATEMENT,
    batch_tag="Stmt",
    transaction_tag="Ntry",
    batch_id_tag="Id",
    batch_count_tag="NbOfNtries",
    batch_sum_tag="Sum",
    transaction_id_tags=("NtryRef",),
    amount_tag="Amt",
)

PROFILES: dict[str, SchemaProfile] = {
    profile.type_code: profile
    for profile in (PAIN1V3, PAIN1V9, PAIN7V2, PAIN8V2, PACS8V2, CAMT53V2)
}

DEFAULT_PROFILE: SchemaProfile = PAIN1V3


def get_profile(type_code: str) -> Optional[SchemaProfile]:
    """Look up a registered profile by type code (case-insensitive)."""
    return PROFILES.get(type_code.strip().upper())

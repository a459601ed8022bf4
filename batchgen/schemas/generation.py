"""Pydantic schemas for generation jobs, diagnostics and API responses."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, ValidationInfo


class DiagnosticKind(str, Enum):
    """Non-fatal conditions recorded while generating a copy."""

    UNKNOWN_MESSAGE_TYPE = "unknown_message_type"
    MISSING_TRANSACTION_TEMPLATE = "missing_transaction_template"
    MALFORMED_AMOUNT = "malformed_amount"
    MISSING_REQUIRED_FIELD = "missing_required_field"


class Diagnostic(BaseModel):
    """A warning attached to a generated copy."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    message: str
    copy_index: Optional[int] = Field(
        None,
        description="0-based copy index; None for job-wide diagnostics",
    )


class GenerationJob(BaseModel):
    """A validated request to expand one template into several copies."""

    template: bytes = Field(..., min_length=1)
    num_transactions: int = Field(
        ...,
        gt=0,
        description="Total transactions per copy, spread across all batches",
    )
    num_batches: int = Field(
        ...,
        gt=0,
        description="Batches per copy; may not exceed num_transactions",
    )
    num_copies: int = Field(..., gt=0, description="Independent copies to produce")

    @field_validator("num_batches")
    @classmethod
    def _batches_fit_transactions(cls, value: int, info: ValidationInfo) -> int:
        num_transactions = info.data.get("num_transactions")
        if num_transactions is not None and value > num_transactions:
            raise ValueError(
                f"cannot spread {num_transactions} transactions over "
                f"{value} batches without leaving a batch empty"
            )
        return value


class GeneratedFileInfo(BaseModel):
    """One file inside a generated archive."""

    filename: str
    size: int
    message_id: str
    transaction_count: int
    control_sum: str


class GenerationResponse(BaseModel):
    """Schema returned after a successful generation request."""

    download_id: str = Field(..., description="Single-use id for the zip download")
    archive_name: str
    type_code: str = Field(..., description="Message type code, e.g. PAIN1V3")
    classification_code: str = Field(
        ...,
        description="Batch/transaction shape: SDSC, SDMC, MSDSC or MDMC",
    )
    recognized: bool = Field(
        ...,
        description="False when the default profile was substituted",
    )
    files: list[GeneratedFileInfo] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    saved_to: Optional[str] = Field(
        None,
        description="Output directory the files were also written to, if requested",
    )


class GeneratedFilesListing(BaseModel):
    """Generated files currently present in the output directory."""

    directory: str
    files: list[str] = Field(default_factory=list)


class CleanupResponse(BaseModel):
    directory: str
    deleted: int

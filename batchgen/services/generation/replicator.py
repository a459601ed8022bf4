"""Batch/transaction replication -- the core of the generator.

Given one parsed copy of a template, the replicator:
  1. Keeps the first batch node and drops the others.
  2. Writes the copy's message id into the group header.
  3. Clones the batch ``num_batches`` times, spreading ``num_transactions``
     as evenly as possible (earlier batches take the remainder).
  4. Inside each batch keeps the first transaction node and clones it as
     many times as that batch needs, minting ids derived from the message id.
  5. Sums amounts with ``Decimal`` and writes counts/sums at batch and
     header level wherever the schema variant has those fields.  A header
     inside the batch element (pacs.008) carries that batch's own totals.

Node lists are always snapshotted before the tree is mutated, and clones
are taken from pristine copies of the first batch/transaction, so a batch
never inherits transactions replicated into an earlier batch.
"""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from batchgen.core.exceptions import MissingBatchTemplate
from batchgen.core.logging import get_logger
from batchgen.schemas.generation import Diagnostic, DiagnosticKind
from batchgen.services.generation.fields import (
    find_all,
    find_first,
    find_path,
    insert_after,
    local_name,
    parent_map,
    read_text,
    set_optional_text,
    set_required_text,
)
from batchgen.services.generation.naming import (
    batch_identifier,
    mint_message_id,
    transaction_identifier,
)
from batchgen.services.generation.profiles import SchemaProfile

logger = get_logger(__name__)

MESSAGE_ID_TAG = "MsgId"


@dataclass
class BatchSummary:
    """Aggregates written for one batch."""

    index: int
    batch_id: Optional[str]
    transaction_count: int
    control_sum: Decimal


@dataclass
class ReplicationResult:
    """Outcome of replicating one copy."""

    message_id: str
    batches: List[BatchSummary] = field(default_factory=list)
    transaction_count: int = 0
    control_sum: Decimal = Decimal(0)
    malformed_amounts: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)


def distribute(num_transactions: int, num_batches: int) -> List[int]:
    """Per-batch transaction counts; the first ``n % b`` batches get one extra."""
    per_batch, remainder = divmod(num_transactions, num_batches)
    return [per_batch + (1 if i < remainder else 0) for i in range(num_batches)]


def format_sum(value: Decimal) -> str:
    """Plain (non-exponent) rendering of a control sum."""
    return format(value, "f")


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """Parse an amount exactly; None when it is missing or not a finite number."""
    if text is None:
        return None
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def find_batch_nodes(root: ET.Element, profile: SchemaProfile) -> List[ET.Element]:
    return find_all(root, profile.batch_tag)


class BatchReplicator:
    """Expands one template copy in place according to a ``SchemaProfile``."""

    def __init__(self, profile: SchemaProfile) -> None:
        self.profile = profile

    # ── Public API ───────────────────────────────────────────────────

    def replicate(
        self,
        root: ET.Element,
        num_transactions: int,
        num_batches: int,
        message_id: Optional[str] = None,
        copy_index: Optional[int] = None,
    ) -> ReplicationResult:
        """Mutate *root* so it holds ``num_batches`` populated batches.

        Args:
            root: Root of a private clone of the template.
            num_transactions: Total transactions across all batches.
            num_batches: Number of batch subtrees to produce.
            message_id: Id seeding every batch/transaction id; minted from
                the current time when omitted.
            copy_index: Copy being produced, stamped on diagnostics.

        Raises:
            MissingBatchTemplate: If the template holds no batch node.
        """
        profile = self.profile

        # 1. Snapshot batch nodes
        batch_nodes = find_batch_nodes(root, profile)
        if not batch_nodes:
            raise MissingBatchTemplate(profile.batch_tag)

        parents = parent_map(root)
        first_batch = batch_nodes[0]
        batch_parent = parents[first_batch]

        # 2. Keep only the first batch
        for extra in batch_nodes[1:]:
            parents[extra].remove(extra)

        # 3. Message id
        if message_id is None:
            message_id = mint_message_id(datetime.now())
        result = ReplicationResult(message_id=message_id)
        set_required_text(
            root, MESSAGE_ID_TAG, message_id, result.diagnostics, copy_index
        )

        batch_template = copy.deepcopy(first_batch)

        # 4-9. Batches
        clones: List[ET.Element] = []
        for i, count in enumerate(distribute(num_transactions, num_batches)):
            batch = first_batch if i == 0 else copy.deepcopy(batch_template)
            summary = self._fill_batch(batch, i, count, message_id, result, copy_index)
            result.batches.append(summary)
            result.transaction_count += summary.transaction_count
            result.control_sum += summary.control_sum
            if i > 0:
                clones.append(batch)

        anchor = first_batch
        for clone in clones:
            insert_after(batch_parent, anchor, clone)
            anchor = clone

        if result.malformed_amounts:
            message = (
                f"{result.malformed_amounts} of {result.transaction_count} "
                "transaction amounts could not be parsed; excluded from control sums"
            )
            result.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_AMOUNT,
                    message=message,
                    copy_index=copy_index,
                )
            )

        # 10. Header aggregates: one header per batch wrapper (pacs.008),
        # otherwise a single document-level header
        batches = [first_batch] + clones
        wrapped = [find_first(b, profile.header_tag) for b in batches]
        if any(h is not None for h in wrapped):
            for header, summary in zip(wrapped, result.batches):
                if header is not None:
                    self._write_header(
                        header, summary.transaction_count, summary.control_sum
                    )
        else:
            header = find_first(root, profile.header_tag)
            if header is not None:
                self._write_header(
                    header, result.transaction_count, result.control_sum
                )

        logger.debug(
            "Replicated %s: msg_id=%s batches=%d transactions=%d sum=%s",
            profile.type_code,
            message_id,
            len(result.batches),
            result.transaction_count,
            format_sum(result.control_sum),
        )
        return result

    # ── Private helpers ──────────────────────────────────────────────

    def _fill_batch(
        self,
        batch: ET.Element,
        batch_index: int,
        count: int,
        message_id: str,
        result: ReplicationResult,
        copy_index: Optional[int],
    ) -> BatchSummary:
        """Populate one batch with *count* transactions and write its aggregates."""
        profile = self.profile

        batch_id: Optional[str] = None
        if profile.batch_id_tag:
            batch_id = batch_identifier(message_id, batch_index)
            set_required_text(
                batch, profile.batch_id_tag, batch_id, result.diagnostics, copy_index
            )

        emitted, batch_sum = self._fill_transactions(
            batch, batch_index, count, message_id, result, copy_index
        )

        if profile.batch_count_tag:
            set_optional_text(batch, profile.batch_count_tag, str(emitted))
        if profile.batch_sum_tag:
            set_optional_text(batch, profile.batch_sum_tag, format_sum(batch_sum))

        return BatchSummary(
            index=batch_index,
            batch_id=batch_id,
            transaction_count=emitted,
            control_sum=batch_sum,
        )

    def _fill_transactions(
        self,
        batch: ET.Element,
        batch_index: int,
        count: int,
        message_id: str,
        result: ReplicationResult,
        copy_index: Optional[int],
    ) -> tuple[int, Decimal]:
        profile = self.profile
        batch_sum = Decimal(0)

        tx_nodes = find_all(batch, profile.transaction_tag)
        if not tx_nodes:
            message = (
                f"No '{profile.transaction_tag}' (transaction) element found in "
                f"'{local_name(batch.tag)}'; batch {batch_index + 1} left empty"
            )
            logger.warning(message)
            result.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MISSING_TRANSACTION_TEMPLATE,
                    message=message,
                    copy_index=copy_index,
                )
            )
            return 0, batch_sum

        parents = parent_map(batch)
        first_tx = tx_nodes[0]
        tx_parent = parents[first_tx]
        for extra in tx_nodes[1:]:
            parents[extra].remove(extra)

        if count == 0:
            tx_parent.remove(first_tx)
            return 0, batch_sum

        tx_template = copy.deepcopy(first_tx)
        # Clones go directly after the first transaction, in order
        position = list(tx_parent).index(first_tx)
        malformed = 0
        sample: Optional[str] = None
        for j in range(count):
            tx = first_tx if j == 0 else copy.deepcopy(tx_template)
            self._stamp_identifiers(tx, message_id, batch_index, j)

            amount, unparsable = self._read_amount(tx)
            if amount is not None:
                batch_sum += amount
            elif unparsable is not None:
                malformed += 1
                sample = unparsable if sample is None else sample

            if j > 0:
                tx_parent.insert(position + j, tx)

        if malformed:
            logger.warning(
                "Batch B%d: %d of %d amounts could not be parsed (%r); "
                "excluded from control sums",
                batch_index + 1,
                malformed,
                count,
                sample,
            )
            result.malformed_amounts += malformed
        return count, batch_sum

    def _stamp_identifiers(
        self, tx: ET.Element, message_id: str, batch_index: int, tx_index: int
    ) -> None:
        tx_id = transaction_identifier(message_id, batch_index, tx_index)
        for position, tag in enumerate(self.profile.transaction_id_tags):
            # The third id field gets a suffix so it differs from the others
            value = f"{tx_id}X" if position == 2 else tx_id
            set_optional_text(tx, tag, value)

    def _read_amount(self, tx: ET.Element) -> tuple[Optional[Decimal], Optional[str]]:
        """Amount of one transaction, plus the raw text when it is unparsable."""
        profile = self.profile
        amount_el = find_first(tx, profile.amount_tag)
        if amount_el is None and profile.amount_fallback_path:
            amount_el = find_path(tx, profile.amount_fallback_path)
        if amount_el is None:
            return None, None

        raw = read_text(amount_el)
        amount = parse_amount(raw)
        if amount is None:
            return None, raw or ""
        return amount, None

    def _write_header(self, header: ET.Element, count: int, total: Decimal) -> None:
        set_optional_text(header, self.profile.document_count_tag, str(count))
        for tag in self.profile.document_sum_tags:
            set_optional_text(header, tag, format_sum(total))

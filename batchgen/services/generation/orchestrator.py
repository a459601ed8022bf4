"""Copy orchestrator -- fans one parsed template out into N generated copies.

A job runs in three phases:
  1. Validate parameters, parse the template once and classify it once.
     Anything wrong here rejects the whole job before work starts.
  2. Submit one task per copy to a bounded thread pool.  Each task deep-clones
     the template, refreshes dates, replicates batches and serializes.
  3. Collect an explicit outcome per task.  The job succeeds only when every
     copy does; otherwise the caller gets a ``GenerationJobFailed`` that
     lists which copies were produced and which were not.
"""

from __future__ import annotations

import os
import random
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from batchgen.core.config import Settings, settings
from batchgen.core.exceptions import (
    GenerationJobFailed,
    InvalidParameter,
    MissingBatchTemplate,
)
from batchgen.core.logging import get_logger
from batchgen.schemas.generation import Diagnostic, GenerationJob
from batchgen.services.generation.classifier import Classification, classify
from batchgen.services.generation.fields import set_optional_text, set_required_text
from batchgen.services.generation.loader import TemplateDocument, load_template
from batchgen.services.generation.naming import (
    classification_code,
    copy_filename,
    creation_datetime,
    iso_date,
    mint_message_ids,
)
from batchgen.services.generation.replicator import BatchReplicator, find_batch_nodes
from batchgen.services.generation.serializer import serialize

logger = get_logger(__name__)

CREATION_DATE_TAG = "CreDtTm"


@dataclass
class GeneratedCopy:
    """One generated document, ready to be stored or delivered."""

    copy_index: int
    filename: str
    content: bytes
    message_id: str
    transaction_count: int
    control_sum: Decimal
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class CopyOutcome:
    """Result of a single copy task: either ``copy`` or ``error`` is set."""

    copy_index: int
    copy: Optional[GeneratedCopy] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.copy is not None


@dataclass
class JobResult:
    """All copies of a successful job, ordered by copy index."""

    type_code: str
    classification_code: str
    classification: Classification
    copies: List[GeneratedCopy] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for c in self.copies for d in c.diagnostics]


def validate_job(
    template: bytes,
    num_transactions: Any,
    num_batches: Any,
    num_copies: Any,
    config: Settings = settings,
) -> GenerationJob:
    """Build a ``GenerationJob`` or reject the request.

    Raises:
        InvalidParameter: For missing, unparsable, non-positive or
            out-of-range values, or more batches than transactions.
    """
    try:
        job = GenerationJob(
            template=template,
            num_transactions=num_transactions,
            num_batches=num_batches,
            num_copies=num_copies,
        )
    except ValidationError as exc:
        error = exc.errors()[0]
        parameter = str(error["loc"][0]) if error.get("loc") else "job"
        raise InvalidParameter(parameter, error.get("input"), error["msg"]) from exc

    limits = (
        ("num_transactions", job.num_transactions, config.max_transactions),
        ("num_batches", job.num_batches, config.max_batches),
        ("num_copies", job.num_copies, config.max_copies),
        ("template", len(job.template), config.max_template_bytes),
    )
    for name, value, ceiling in limits:
        if value > ceiling:
            raise InvalidParameter(name, value, f"exceeds the configured maximum of {ceiling}")
    return job


class CopyOrchestrator:
    """Produces ``num_copies`` independent documents from one template."""

    def __init__(
        self,
        config: Settings = settings,
        now: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.now = now
        self.rng = rng or random.Random()
        self.max_workers = config.max_workers or os.cpu_count() or 1

    # ── Public API ───────────────────────────────────────────────────

    def generate(self, job: GenerationJob) -> JobResult:
        """Run a validated job to completion.

        Raises:
            TemplateParseError: The template is not well-formed XML.
            MissingBatchTemplate: The template has nothing to replicate.
            GenerationJobFailed: At least one copy failed.
        """
        template = load_template(job.template)
        classification = classify(template.root)
        profile = classification.profile

        if not find_batch_nodes(template.root, profile):
            logger.error(
                "Template has no '%s' element; rejecting job", profile.batch_tag
            )
            raise MissingBatchTemplate(profile.batch_tag)

        shape = classification_code(job.num_transactions, job.num_batches)
        message_ids = mint_message_ids(self.now(), job.num_copies, self.rng)

        logger.info(
            "Generation started: type=%s shape=%s transactions=%d batches=%d "
            "copies=%d workers=%d",
            classification.type_code,
            shape,
            job.num_transactions,
            job.num_batches,
            job.num_copies,
            self.max_workers,
        )

        outcomes: List[CopyOutcome] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {}
            for k in range(job.num_copies):
                # The file timestamp is fixed at dispatch, per copy
                filename = copy_filename(classification.type_code, shape, self.now(), k)
                future = executor.submit(
                    self._run_copy,
                    template,
                    classification,
                    job,
                    k,
                    message_ids[k],
                    filename,
                )
                futures[future] = k

            for future in as_completed(futures):
                outcomes.append(future.result())

        outcomes.sort(key=lambda o: o.copy_index)
        succeeded = [o.copy for o in outcomes if o.ok]
        failures = [o for o in outcomes if not o.ok]

        if failures:
            fatal = next(
                (o.error for o in failures if isinstance(o.error, MissingBatchTemplate)),
                None,
            )
            if fatal is not None:
                raise fatal
            logger.error(
                "Generation failed: %d of %d copies failed",
                len(failures),
                job.num_copies,
            )
            raise GenerationJobFailed(succeeded=succeeded, failures=failures)

        logger.info(
            "Generation complete: type=%s copies=%d", classification.type_code, len(succeeded)
        )
        return JobResult(
            type_code=classification.type_code,
            classification_code=shape,
            classification=classification,
            copies=succeeded,
        )

    # ── Private helpers ──────────────────────────────────────────────

    def _run_copy(
        self,
        template: TemplateDocument,
        classification: Classification,
        job: GenerationJob,
        copy_index: int,
        message_id: str,
        filename: str,
    ) -> CopyOutcome:
        """Worker entry point; never raises, the outcome carries the error."""
        try:
            generated = self._produce_copy(
                template, classification, job, copy_index, message_id, filename
            )
        except Exception as exc:
            logger.exception("Copy %d failed", copy_index + 1)
            return CopyOutcome(copy_index=copy_index, error=exc)
        return CopyOutcome(copy_index=copy_index, copy=generated)

    def _produce_copy(
        self,
        template: TemplateDocument,
        classification: Classification,
        job: GenerationJob,
        copy_index: int,
        message_id: str,
        filename: str,
    ) -> GeneratedCopy:
        profile = classification.profile
        diagnostics: List[Diagnostic] = []
        if classification.diagnostic is not None:
            diagnostics.append(
                classification.diagnostic.model_copy(update={"copy_index": copy_index})
            )

        root = template.clone()
        self._refresh_dates(root, profile.execution_date_tag, diagnostics, copy_index)

        replication = BatchReplicator(profile).replicate(
            root,
            job.num_transactions,
            job.num_batches,
            message_id=message_id,
            copy_index=copy_index,
        )
        diagnostics.extend(replication.diagnostics)

        content = serialize(root, template.default_namespace)
        logger.debug("Copy %d serialized: %s (%d bytes)", copy_index + 1, filename, len(content))

        return GeneratedCopy(
            copy_index=copy_index,
            filename=filename,
            content=content,
            message_id=replication.message_id,
            transaction_count=replication.transaction_count,
            control_sum=replication.control_sum,
            diagnostics=diagnostics,
        )

    def _refresh_dates(
        self,
        root: ET.Element,
        execution_date_tag: Optional[str],
        diagnostics: List[Diagnostic],
        copy_index: int,
    ) -> None:
        """Stamp the creation time (expected) and execution date (if present)."""
        instant = self.now()
        set_required_text(
            root, CREATION_DATE_TAG, creation_datetime(instant), diagnostics, copy_index
        )
        if execution_date_tag:
            set_optional_text(
                root, execution_date_tag, iso_date(instant), descend=True
            )

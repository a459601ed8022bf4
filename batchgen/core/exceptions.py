"""Typed exceptions raised by the batch generator.

Fatal conditions are exceptions; recoverable ones are recorded as
``Diagnostic`` entries on each generated copy instead.

    GenerationError (base)
    |
    +-- InvalidParameter         job rejected before any work starts
    +-- TemplateParseError       uploaded template is not well-formed XML
    +-- MissingBatchTemplate     template has no batch node to replicate
    +-- GenerationJobFailed      one or more copies failed during fan-out
"""

from __future__ import annotations

from typing import Any, Optional


class GenerationError(Exception):
    """Base exception for all generation errors.

    Every subclass carries a machine-readable ``code``.
    """

    code: str = "GENERATION_ERROR"


class InvalidParameter(GenerationError, ValueError):
    """A job parameter is non-positive, unparsable or out of range."""

    code: str = "INVALID_PARAMETER"

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {parameter}={value!r}: {reason}")


class TemplateParseError(GenerationError):
    """The template bytes could not be parsed as XML."""

    code: str = "TEMPLATE_PARSE_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Template is not well-formed XML: {reason}")


class MissingBatchTemplate(GenerationError):
    """No element with the profile's batch tag exists in the template."""

    code: str = "MISSING_BATCH_TEMPLATE"

    def __init__(self, batch_tag: str, detail: Optional[str] = None):
        self.batch_tag = batch_tag
        message = f"No '{batch_tag}' (batch) element found in the template"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class GenerationJobFailed(GenerationError):
    """Raised when any copy of a job fails.

    Carries the copies that did succeed alongside the per-copy failures so
    the caller can report exactly which copies were produced.
    """

    code: str = "GENERATION_JOB_FAILED"

    def __init__(self, succeeded: list, failures: list):
        self.succeeded = succeeded
        self.failures = failures
        super().__init__(
            f"{len(failures)} of {len(succeeded) + len(failures)} copies failed"
        )

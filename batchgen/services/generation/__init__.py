"""Template expansion: classify, replicate, serialize and fan out copies."""

from batchgen.services.generation.classifier import Classification, classify
from batchgen.services.generation.orchestrator import (
    CopyOrchestrator,
    GeneratedCopy,
    JobResult,
    validate_job,
)
from batchgen.services.generation.profiles import DEFAULT_PROFILE, PROFILES, SchemaProfile
from batchgen.services.generation.replicator import BatchReplicator

__all__ = [
    "BatchReplicator",
    "Classification",
    "CopyOrchestrator",
    "DEFAULT_PROFILE",
    "GeneratedCopy",
    "JobResult",
    "PROFILES",
    "SchemaProfile",
    "classify",
    "validate_job",
]

"""Generation endpoints.

Accepts an uploaded ISO 20022 template plus the three job counts, produces
the copies, zips them into the in-memory archive store and hands back a
single-use download id.
"""

from __future__ import annotations

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from batchgen.core.config import settings
from batchgen.core.exceptions import (
    GenerationJobFailed,
    InvalidParameter,
    MissingBatchTemplate,
    TemplateParseError,
)
from batchgen.core.logging import get_logger
from batchgen.schemas.generation import (
    CleanupResponse,
    GeneratedFileInfo,
    GeneratedFilesListing,
    GenerationResponse,
)
from batchgen.services.delivery.archive import build_archive
from batchgen.services.delivery.files import (
    cleanup_generated_files,
    list_generated_files,
    save_copies,
)
from batchgen.services.delivery.store import pending_count, store_archive, take_archive
from batchgen.services.generation.naming import archive_filename
from batchgen.services.generation.orchestrator import CopyOrchestrator, validate_job
from batchgen.services.generation.replicator import format_sum

logger = get_logger(__name__)

router = APIRouter()


@router.post("/generate", response_model=GenerationResponse)
async def generate_files(
    file: UploadFile = File(..., description="Sample ISO 20022 XML template"),
    num_transactions: str = Form(..., description="Transactions per generated file"),
    num_batches: str = Form(..., description="Batches per generated file"),
    num_copies: str = Form(..., description="Number of files to generate"),
    save: bool = Form(
        False,
        description="Also write the files to the output directory, replacing earlier ones",
    ),
) -> GenerationResponse:
    """Expand the uploaded template into ``num_copies`` files.

    The files are zipped and kept until downloaded once via
    ``GET /downloads/{download_id}``.  With ``save=true`` they are also
    written to ``settings.output_dir`` after previously generated files
    there are removed.
    """
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded template is empty.")

    filename = file.filename or "unknown"
    logger.info(
        "Received template: file=%s size=%d transactions=%s batches=%s copies=%s",
        filename,
        len(content),
        num_transactions,
        num_batches,
        num_copies,
    )

    try:
        job = validate_job(content, num_transactions, num_batches, num_copies, settings)
        orchestrator = CopyOrchestrator(config=settings)
        result = await run_in_threadpool(orchestrator.generate, job)
    except (InvalidParameter, TemplateParseError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except MissingBatchTemplate as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except GenerationJobFailed as exc:
        logger.error("Generation failed for %s: %s", filename, exc)
        raise HTTPException(
            status_code=500,
            detail={
                "message": str(exc),
                "succeeded": [c.filename for c in exc.succeeded],
                "failed": [
                    {"copy": o.copy_index + 1, "error": str(o.error)}
                    for o in exc.failures
                ],
            },
        )

    archive_name = archive_filename(
        result.type_code, result.classification_code, orchestrator.now()
    )
    download_id = store_archive(archive_name, build_archive(result.copies))
    logger.info(
        "Generated %s with %d files; %d archives awaiting download",
        archive_name,
        len(result.copies),
        pending_count(),
    )

    saved_to = None
    if save:
        cleanup_generated_files(settings.output_dir)
        save_copies(result.copies, settings.output_dir)
        saved_to = settings.output_dir

    return GenerationResponse(
        download_id=download_id,
        archive_name=archive_name,
        type_code=result.type_code,
        classification_code=result.classification_code,
        recognized=result.classification.recognized,
        files=[
            GeneratedFileInfo(
                filename=c.filename,
                size=len(c.content),
                message_id=c.message_id,
                transaction_count=c.transaction_count,
                control_sum=format_sum(c.control_sum),
            )
            for c in result.copies
        ],
        diagnostics=result.diagnostics,
        saved_to=saved_to,
    )


@router.get("/files", response_model=GeneratedFilesListing)
def list_files() -> GeneratedFilesListing:
    """List generated files currently kept in the output directory."""
    paths = list_generated_files(settings.output_dir)
    return GeneratedFilesListing(
        directory=settings.output_dir, files=[p.name for p in paths]
    )


@router.delete("/files", response_model=CleanupResponse)
def cleanup_files() -> CleanupResponse:
    """Delete generated files from the output directory; other files are kept."""
    deleted = cleanup_generated_files(settings.output_dir)
    return CleanupResponse(directory=settings.output_dir, deleted=deleted)


@router.get("/downloads/{download_id}")
def download_archive(download_id: str) -> Response:
    """Download a generated archive.  Each id can be used once."""
    archive = take_archive(download_id)
    if archive is None:
        raise HTTPException(
            status_code=404, detail="Download link invalid or already used."
        )
    return Response(
        content=archive.content,
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={archive.name}"},
    )

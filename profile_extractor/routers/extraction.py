import asyncio
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from profile_extractor.dependencies import ExtractionDep, JobStoreDep, LLMEnabledDep
from profile_extractor.jobs import JobStore
from profile_extractor.schemas.responses import (
    ExtractionRequest,
    ExtractionResponse,
    HealthResponse,
    JobStatusResponse,
    JobSubmittedResponse,
)
from profile_extractor.services.extraction import ExtractionService, normalize_input_url

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_extraction(
    job_id: str,
    service: ExtractionService,
    store: JobStore,
    request: ExtractionRequest,
) -> None:
    store.mark_running(job_id)
    try:
        result = await service.run(request.url, use_llm=request.use_llm, screenshot=request.screenshot)
        store.mark_completed(job_id, result)
    except Exception as exc:
        logger.exception("Extraction job %s failed", job_id)
        store.mark_failed(job_id, str(exc))


@router.post("/extract", response_model=JobSubmittedResponse, status_code=202)
async def extract_profile(
    request: ExtractionRequest,
    service: ExtractionDep,
    store: JobStoreDep,
) -> JobSubmittedResponse:
    # Reject bad URLs before queueing so the caller gets a 400
    url = normalize_input_url(request.url)
    request = request.model_copy(update={"url": url})

    existing = store.has_active_job(url)
    if existing:
        return JSONResponse(content={
            "job_id": existing.job_id,
            "status": "already_running",
            "message": "An extraction for this URL is already in progress",
        })

    job = store.create_job(url=url)
    asyncio.create_task(_run_extraction(job.job_id, service, store, request))
    return JobSubmittedResponse(
        job_id=job.job_id,
        status=job.status,
        message="Extraction job submitted",
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, store: JobStoreDep) -> JobStatusResponse:
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse(**job.model_dump())


@router.post("/extract/sync", response_model=ExtractionResponse)
async def extract_profile_sync(request: ExtractionRequest, service: ExtractionDep) -> ExtractionResponse:
    return await service.run(request.url, use_llm=request.use_llm, screenshot=request.screenshot)


@router.get("/health", response_model=HealthResponse)
async def health(llm_enabled: LLMEnabledDep) -> HealthResponse:
    return HealthResponse(status="ok", llm_enabled=llm_enabled)

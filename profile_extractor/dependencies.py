from typing import Annotated

from fastapi import Depends, Request

from profile_extractor.jobs import JobStore
from profile_extractor.services.extraction import ExtractionService


def get_extraction_service(request: Request) -> ExtractionService:
    return request.app.state.extraction_service


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_llm_enabled(request: Request) -> bool:
    return getattr(request.app.state, "llm_enabled", False)


ExtractionDep = Annotated[ExtractionService, Depends(get_extraction_service)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
LLMEnabledDep = Annotated[bool, Depends(get_llm_enabled)]

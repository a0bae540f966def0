"""Content analysis API router"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from detection_backend.errors import AnalysisError, StorageError, ValidationError
from detection_backend.models.schemas import (
    AnalysisResult,
    AnalyzeRequest,
    AnalyzeResponse,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    BatchItemResult,
    ErrorResponse,
    ResolveRequest,
)
from detection_backend.services.analysis import AnalysisService
from detection_backend.services.repository import AnalysisRepository
from detection_backend.api.dependencies import get_analysis_service, get_repository
from detection_backend.settings import settings

router = APIRouter(prefix="/api", tags=["Analysis"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Content empty or missing"},
    500: {"model": ErrorResponse, "description": "Scoring or storage failure"},
}
NOT_FOUND_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Analysis not found"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}


def failure_detail(error: str, exc: Exception) -> dict:
    """Error body; the underlying cause is exposed in development mode only"""
    return {
        "error": error,
        "details": str(exc) if settings.is_development else "Internal server error",
    }


@router.post("/analyze", response_model=AnalyzeResponse, response_model_by_alias=True, responses=ERROR_RESPONSES)
async def analyze_content(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Score one submission, persist it and update the author's activity profile

    - 400: content empty or missing
    - 500: scoring or storage failure
    """
    request_id = str(uuid.uuid4())
    logger.info(f"[{request_id}] Analysis request: platform={request.metadata.platform}, userId={request.metadata.user_id}")

    try:
        analysis = await service.analyze_and_store(request.content, request.metadata)
        return AnalyzeResponse(analysis=analysis)
    except ValidationError as e:
        logger.warning(f"[{request_id}] Rejected: {e}")
        raise HTTPException(status_code=400, detail={"error": e.message})
    except (AnalysisError, StorageError) as e:
        logger.error(f"[{request_id}] Analysis API error: {e}")
        raise HTTPException(status_code=500, detail=failure_detail("Analysis failed", e))


@router.post("/analyze/batch", response_model=BatchAnalyzeResponse, response_model_by_alias=True)
async def analyze_batch(
    request: BatchAnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    """Score up to 100 submissions; each item succeeds or fails on its own"""
    request_id = str(uuid.uuid4())
    logger.info(f"[{request_id}] Batch analysis request: {len(request.items)} items")

    results = []
    for index, item in enumerate(request.items):
        try:
            analysis = await service.analyze_and_store(item.content, item.metadata)
            results.append(BatchItemResult(index=index, analysis=analysis))
        except ValidationError as e:
            results.append(BatchItemResult(index=index, error=e.message))
        except (AnalysisError, StorageError) as e:
            logger.error(f"[{request_id}] Batch item {index} failed: {e}")
            results.append(BatchItemResult(index=index, error="Analysis failed"))

    accepted = sum(1 for r in results if r.analysis is not None)
    logger.info(f"[{request_id}] Batch done: accepted={accepted}, rejected={len(results) - accepted}")
    return BatchAnalyzeResponse(accepted=accepted, rejected=len(results) - accepted, results=results)


@router.get("/analyses/{record_id}", response_model=AnalysisResult, response_model_by_alias=True, responses=NOT_FOUND_RESPONSES)
async def get_analysis(
    record_id: int,
    repository: AnalysisRepository = Depends(get_repository),
):
    """Stored analysis by id"""
    try:
        result = repository.get(record_id)
    except StorageError as e:
        logger.error(f"Analysis lookup failed: {e}")
        raise HTTPException(status_code=500, detail=failure_detail("Analysis lookup failed", e))
    if result is None:
        raise HTTPException(status_code=404, detail={"error": "Analysis not found"})
    return result


@router.patch("/analyses/{record_id}/resolve", response_model=AnalysisResult, response_model_by_alias=True, responses=NOT_FOUND_RESPONSES)
async def resolve_analysis(
    record_id: int,
    body: Optional[ResolveRequest] = None,
    repository: AnalysisRepository = Depends(get_repository),
):
    """Mark an analysis as reviewed by a moderator (resolved=false reopens it)"""
    resolved = body.resolved if body is not None else True
    try:
        result = repository.mark_resolved(record_id, resolved)
    except StorageError as e:
        logger.error(f"Resolve failed: {e}")
        raise HTTPException(status_code=500, detail=failure_detail("Resolve failed", e))
    if result is None:
        raise HTTPException(status_code=404, detail={"error": "Analysis not found"})
    logger.info(f"Analysis {record_id} resolved={resolved}")
    return result

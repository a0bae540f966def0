"""Dashboard API router"""
from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from detection_backend.errors import StorageError
from detection_backend.models.schemas import DashboardResponse, ErrorResponse, Timeframe
from detection_backend.services.dashboard import DashboardService
from detection_backend.api.dependencies import get_dashboard_service

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/dashboard", response_model=DashboardResponse, response_model_by_alias=True, responses={500: {"model": ErrorResponse}})
async def get_dashboard(
    timeframe: Timeframe = Query(Timeframe.ONE_DAY, description="Window: 1h, 24h, 7d, all"),
    platform: str = Query("all", description="Platform filter, 'all' for every platform"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Tier counts and distribution, platform breakdown and the 10 most recent analyses"""
    try:
        logger.info(f"Dashboard request: timeframe={timeframe.value}, platform={platform}")
        return DashboardResponse(dashboard=service.dashboard_summary(timeframe, platform))
    except StorageError as e:
        logger.error(f"Dashboard API error: {e}")
        raise HTTPException(status_code=500, detail={"error": "Dashboard data retrieval failed"})

"""Network analysis API router"""
from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from detection_backend.errors import StorageError
from detection_backend.models.schemas import ErrorResponse, NetworkAnalysisResponse, Timeframe
from detection_backend.services.dashboard import DashboardService
from detection_backend.api.dependencies import get_dashboard_service

router = APIRouter(prefix="/api", tags=["Network"])


@router.get("/network-analysis", response_model=NetworkAnalysisResponse, response_model_by_alias=True, responses={500: {"model": ErrorResponse}})
async def get_network_analysis(
    timeframe: Timeframe = Query(Timeframe.ONE_DAY, description="Window: 1h, 24h, 7d, all"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Top 20 users with coordinated network indicators, highest summed risk first"""
    try:
        return NetworkAnalysisResponse(suspicious_networks=service.suspicious_actors(timeframe))
    except StorageError as e:
        logger.error(f"Network analysis API error: {e}")
        raise HTTPException(status_code=500, detail={"error": "Network analysis failed"})

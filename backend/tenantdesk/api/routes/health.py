from fastapi import APIRouter, Depends, Response, status
from ...schemas import HealthReport
from ...services import HealthService
from ...utils import create_response
from ..dependencies import get_health_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(
    response: Response,
    health_service: HealthService = Depends(get_health_service),
):
    """Database, cache and server status"""
    report = HealthReport.model_validate(health_service.check())
    status_code = status.HTTP_200_OK
    if report.status != "healthy":
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    response.status_code = status_code
    return create_response(data=report, status_code=status_code)


@router.delete("/cache")
def clear_cache(health_service: HealthService = Depends(get_health_service)):
    """Flush cached API responses"""
    result = health_service.clear_cache()
    return create_response(data={"deletedKeys": result["deleted_keys"]}, message="Cache cleared successfully")


@router.delete("/logs")
def clear_logs(health_service: HealthService = Depends(get_health_service)):
    """Delete every file in the log directory"""
    result = health_service.clear_log_files()
    return create_response(data={"deletedFiles": result["deleted_files"]}, message="Log files cleared successfully")

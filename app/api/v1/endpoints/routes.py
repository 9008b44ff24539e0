"""
Route API endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_tracking_service
from app.schemas.tracking import RouteProgress
from app.services.tracking import TrackingService

router = APIRouter()


@router.get("/{route_label}/progress", response_model=RouteProgress)
async def get_route_progress(
    route_label: str,
    tracking: Annotated[TrackingService, Depends(get_tracking_service)],
):
    """
    Get delivery progress of a route.

    - **route_label**: Route label as assigned upstream, e.g. `giga-north-1.19.26`
      (surrounding quotes are ignored)
    """
    progress = await tracking.get_route_progress(route_label)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Route {route_label} not found",
        )
    return progress

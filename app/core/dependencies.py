"""FastAPI dependencies for the process-wide tracking services."""
from fastapi import HTTPException, Request, status

from app.services.chat import ChatService
from app.services.tracking import TrackingService


def get_tracking_service(request: Request) -> TrackingService:
    """Dependency returning the TrackingService created at startup.

    Usage:
        @router.get("/orders/{order_id}/tracking")
        async def track(
            service: Annotated[TrackingService, Depends(get_tracking_service)]
        ):
            ...

    Raises:
        HTTPException 503: If the application has not finished starting up
    """
    service = getattr(request.app.state, "tracking_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tracking service not initialized",
        )
    return service


def get_chat_service(request: Request) -> ChatService:
    """Dependency returning the ChatService created at startup."""
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat service not initialized",
        )
    return service

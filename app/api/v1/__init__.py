"""
API v1 router aggregation.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import chat, orders, routes, sessions

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    chat.router,
    prefix="",
    tags=["Chat"],
)

api_router.include_router(
    sessions.router,
    prefix="/sessions",
    tags=["Sessions"],
)

api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"],
)

api_router.include_router(
    routes.router,
    prefix="/routes",
    tags=["Routes"],
)

"""Primary API router definition."""

from fastapi import APIRouter

from . import admin, me, session

api_router = APIRouter()

api_router.include_router(session.router)
api_router.include_router(me.router)
api_router.include_router(admin.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}

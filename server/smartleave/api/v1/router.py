from fastapi import APIRouter
from smartleave.api.v1.endpoints import health, leave, profiles

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(leave.router, prefix="/leave", tags=["leave"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])

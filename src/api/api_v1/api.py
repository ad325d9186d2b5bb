from fastapi import APIRouter

from api.api_v1.endpoints import (
    nav_settings,
    positions,
)

api_router = APIRouter()

api_router.include_router(
    positions.router, prefix="/positions"
)
api_router.include_router(
    nav_settings.router, prefix="/nav-settings"
)
api_router.redirect_slashes = False

from typing import List

from fastapi import APIRouter, HTTPException, Path, Query

import schemas
from api.api_v1.deps import SessionDep
from services import nav_service, nav_store

router = APIRouter()


@router.get("/{user_id}/available-months", response_model=List[schemas.AvailableMonth])
async def get_available_months(session: SessionDep, user_id: str):
    return nav_store.get_available_months(session, user_id)


@router.get("/{user_id}/history", response_model=schemas.NAVHistory)
async def get_nav_history(
    session: SessionDep,
    user_id: str,
    limit: int = Query(12, ge=1, description="Number of months"),
):
    return nav_store.get_nav_history(session, user_id, limit=limit)


@router.get("/{user_id}/volatility", response_model=schemas.NAVVolatility)
async def get_nav_volatility(session: SessionDep, user_id: str):
    return nav_service.calculate_nav_volatility(session, user_id)


@router.get("/{user_id}/{year}/{month}", response_model=schemas.NAVSettings)
async def get_nav_settings(
    session: SessionDep,
    user_id: str,
    year: int,
    month: int = Path(ge=1, le=12),
):
    nav_settings = nav_store.get_settings(session, user_id, year, month)
    if nav_settings is None:
        raise HTTPException(
            status_code=404,
            detail="The data not found in the database.",
        )
    return nav_settings


@router.get("/{user_id}/{year}/{month}/prior-nav", response_model=schemas.PriorNav)
async def get_prior_nav(
    session: SessionDep,
    user_id: str,
    year: int,
    month: int = Path(ge=1, le=12),
):
    return nav_service.get_prior_nav(session, user_id, year, month)


@router.post("/{user_id}/{year}/{month}", response_model=schemas.NAVSettings)
async def save_nav_settings(
    session: SessionDep,
    user_id: str,
    year: int,
    request: schemas.NAVSettingsRequest,
    month: int = Path(ge=1, le=12),
):
    nav_settings = nav_service.calculate_monthly_nav(session, user_id, year, month, request)
    if nav_settings is None:
        raise HTTPException(
            status_code=400,
            detail=(
                "No prior month NAV found - supply prior_pre_fee_nav "
                "or set use_portfolio_estimate"
            ),
        )
    return nav_settings

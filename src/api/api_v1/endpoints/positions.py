from datetime import datetime

import pendulum
from fastapi import APIRouter, Query

import schemas
from api.api_v1.deps import SessionDep
from services.apy_calculation import calculate_user_position_apys, format_apy_for_display
from utils.json_encoder import custom_encoder

router = APIRouter()


@router.get("/{user_id}/apy", response_model=schemas.PositionAPYResponse)
async def get_position_apys(
    session: SessionDep,
    user_id: str,
    target_date: datetime = Query(None, description="Date to calculate APY for"),
    wallet_address: str = Query(None, description="Wallet address"),
):
    if target_date is None:
        target_date = pendulum.now(tz=pendulum.UTC)

    results = calculate_user_position_apys(
        session, user_id, target_date, wallet_address=wallet_address
    )

    response = schemas.PositionAPYResponse(
        user_id=user_id, target_date=custom_encoder(target_date)
    )
    if not results:
        response.message = "Insufficient data"
        return response

    response.positions = {
        identity: format_apy_for_display(result) for identity, result in results.items()
    }
    return response

import math
from typing import List

from pydantic import BaseModel, field_serializer


class ConfidenceAssessment(BaseModel):
    confidence: str
    warnings: List[str] = []


class APYResult(BaseModel):
    position_identity: str
    apy: float
    period_return_pct: float
    days_elapsed: float
    method: str
    confidence: str
    warnings: List[str] = []
    current_value: float
    reference_value: float | None = None
    rewards: float = 0
    is_new_position: bool = False
    identity_source: str
    protocol_name: str | None = None
    chain: str | None = None
    wallet_address: str | None = None
    notes: str | None = None


class APYDisplay(APYResult):
    formatted_apy: str
    formatted_value: str
    is_reliable: bool

    # JSON has no infinity; an overflowed APY goes out as null
    @field_serializer("apy", "period_return_pct", when_used="json")
    def serialize_finite(self, value: float) -> float | None:
        return value if math.isfinite(value) else None


class PositionAPYResponse(BaseModel):
    user_id: str
    target_date: str
    positions: dict[str, APYDisplay] = {}
    message: str | None = None

from datetime import datetime
from typing import Any

from fastapi.encoders import jsonable_encoder
from pytz import timezone


def custom_encoder(obj: Any):
    """ISO strings in UTC for datetimes; naive values are taken as UTC."""
    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            return obj.replace(tzinfo=timezone("UTC")).isoformat()
        return obj.astimezone(timezone("UTC")).isoformat()
    return jsonable_encoder(obj)

import math
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class PalletsData(BaseModel):
    occupiedPallets: Union[int, float] = 0


class UpdatePalletsRequest(BaseModel):
    # Checked in the route so non-numbers get the error envelope, not a 422.
    occupiedPallets: Any = None


class SaveDataRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pollyData: Optional[Any] = None
    polikarpovaData: Optional[Any] = None
    totalData: Optional[Any] = None


class InventorySnapshot(BaseModel):
    pollyData: Any
    polikarpovaData: Any
    totalData: Any


class StatusResponse(BaseModel):
    status: str
    message: str


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)

import math
import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ADDRESS_NOT_FOUND = "Address not found"
ADDRESS_ERROR = "Error fetching address"


class Pin(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")
    remarks: str = ""
    address: str


class DraftPin(BaseModel):
    """Pending pin awaiting remarks and submit. Never persisted.

    A 0.0 latitude or longitude is a valid coordinate here, unlike a plain
    truthiness check, so points on the equator and prime meridian can be saved.
    """

    lat: Optional[float] = None
    lng: Optional[float] = None
    remarks: str = ""

    def has_valid_coordinates(self) -> bool:
        if self.lat is None or self.lng is None:
            return False
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            return False
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180


def wrap_lng(lng: float) -> float:
    # world copies east/west of the antimeridian report lng outside [-180, 180)
    if not math.isfinite(lng) or -180 <= lng < 180:
        return lng
    return ((lng + 180) % 360) - 180


class PinIdAllocator:
    """Epoch-millisecond ids, bumped past the last issued id on collision."""

    def __init__(self, clock=time.time) -> None:
        self._clock = clock
        self._last = 0

    def seed(self, ids) -> None:
        for i in ids:
            if i > self._last:
                self._last = i

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

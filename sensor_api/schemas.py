from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .domain.reading import Reading


class ReadingOut(BaseModel):
    id: int
    timestamp: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    mq135_raw: Optional[int] = None
    mq135_voltage: Optional[float] = None
    co2_ppm: Optional[float] = None
    nh4_ppm: Optional[float] = None
    alcohol_ppm: Optional[float] = None
    co_ppm: Optional[float] = None
    acetone_ppm: Optional[float] = None
    soil_raw: Optional[int] = None
    soil_percent: Optional[int] = None
    motion_detected: Optional[bool] = None
    relay_on: Optional[bool] = None
    led_on: Optional[bool] = None

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingOut":
        return cls(**reading.to_api_dict())


class IngestResult(BaseModel):
    success: bool = True
    message: str = "Data saved successfully"
    id: int
    timestamp: str


class LatestFreshResponse(BaseModel):
    success: bool = True
    data: ReadingOut


class LatestEmptyResponse(BaseModel):
    success: bool = True
    data: Optional[ReadingOut] = None
    message: str = "No data available yet"


class LatestStaleResponse(BaseModel):
    """Condición lógica (no error HTTP): el nodo dejó de reportar."""

    success: bool = False
    data: Optional[ReadingOut] = None
    message: str = "No recent data (device disconnected)"
    last_update: str
    age_seconds: float


class HistoryResponse(BaseModel):
    success: bool = True
    count: int
    hours: int
    limit: int
    data: List[ReadingOut] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str

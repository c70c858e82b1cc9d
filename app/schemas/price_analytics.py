"""
app/schemas/price_analytics.py

Response schemas for analytical price queries.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class HighestVolumeRecord(BaseModel):
    date: dt.date
    symbol: str
    volume: int


class HighestVolumeResponse(BaseModel):
    highest_volume: HighestVolumeRecord


class AverageCloseResponse(BaseModel):
    average_close: float


class AverageVWAPResponse(BaseModel):
    average_vwap: float

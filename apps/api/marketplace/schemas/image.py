from __future__ import annotations

from datetime import datetime

from pydantic import Field

from marketplace.schemas.common import CamelModel


class VehicleImageOut(CamelModel):
    id: int
    vehicle_id: int
    filename: str
    url: str
    thumbnail_url: str
    display_order: int
    uploaded_at: datetime


class ImageOrderIn(CamelModel):
    display_order: int = Field(..., ge=0)

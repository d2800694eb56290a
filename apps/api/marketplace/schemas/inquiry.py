from __future__ import annotations

from datetime import datetime
from typing import Optional

from marketplace.schemas.common import CamelModel, Paginated


class InquiryIn(CamelModel):
    vehicle_id: Optional[int] = None
    customer_name: str = ""
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    message: str = ""
    inquiry_type: str = ""

    # honeypot（人間には見えないフィールド。値が入っていたらBot扱い）
    website: Optional[str] = None


class InquiryStatusIn(CamelModel):
    status: str = ""


class InquiryOut(CamelModel):
    id: int
    vehicle_id: Optional[int] = None
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    message: str
    inquiry_type: str
    status: str
    created_at: datetime


InquiryListOut = Paginated[InquiryOut]

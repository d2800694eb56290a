from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.orm import Session

from marketplace.core.errors import DomainRuleError, FieldError, NotFoundError, ValidationException
from marketplace.models.inquiry import INQUIRY_STATUSES, Inquiry
from marketplace.models.vehicle import Vehicle
from marketplace.schemas.common import Paginated
from marketplace.schemas.inquiry import InquiryIn, InquiryOut
from marketplace.services.validation import validate_inquiry_input_or_raise

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class InquiryFilters:
    status: Optional[str] = None
    vehicle_id: Optional[int] = None
    page: int = 1
    page_size: int = 20

    def conditions(self) -> List[ColumnElement[bool]]:
        cond: List[ColumnElement[bool]] = []
        if self.status:
            cond.append(Inquiry.status == self.status)
        if self.vehicle_id is not None:
            cond.append(Inquiry.vehicle_id == self.vehicle_id)
        return cond


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class InquiryService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _require(self, inquiry_id: int) -> Inquiry:
        inquiry = self.db.get(Inquiry, inquiry_id, populate_existing=True)
        if inquiry is None:
            raise NotFoundError(f"Inquiry with ID {inquiry_id} not found")
        return inquiry

    def get_inquiry(self, inquiry_id: int) -> Optional[InquiryOut]:
        inquiry = self.db.get(Inquiry, inquiry_id)
        return InquiryOut.model_validate(inquiry) if inquiry is not None else None

    def create_inquiry(self, data: InquiryIn) -> InquiryOut:
        validate_inquiry_input_or_raise(data.model_dump())

        if self.db.get(Vehicle, data.vehicle_id) is None:
            raise DomainRuleError(f"Vehicle with ID {data.vehicle_id} not found", code="INVALID_VEHICLE")

        inquiry = Inquiry(
            vehicle_id=data.vehicle_id,
            customer_name=data.customer_name.strip(),
            customer_email=_clean(data.customer_email),
            customer_phone=_clean(data.customer_phone),
            message=data.message.strip(),
            inquiry_type=data.inquiry_type,
            status="new",
        )
        self.db.add(inquiry)
        self.db.commit()
        logger.info("Inquiry created: id=%s vehicle_id=%s type=%s", inquiry.id, inquiry.vehicle_id, inquiry.inquiry_type)

        return InquiryOut.model_validate(self._require(inquiry.id))

    def list_inquiries(self, filters: InquiryFilters) -> Paginated[InquiryOut]:
        cond = filters.conditions()
        page = max(1, int(filters.page))
        page_size = max(1, min(int(filters.page_size), MAX_PAGE_SIZE))

        total = self.db.execute(select(func.count(Inquiry.id)).where(*cond)).scalar_one()
        rows = self.db.execute(
            select(Inquiry)
            .where(*cond)
            .order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        ).scalars().all()

        return Paginated[InquiryOut](
            items=[InquiryOut.model_validate(r) for r in rows],
            total_count=int(total or 0),
            page=page,
            page_size=page_size,
        )

    def update_inquiry_status(self, inquiry_id: int, status: str) -> InquiryOut:
        inquiry = self._require(inquiry_id)

        if status not in INQUIRY_STATUSES:
            raise ValidationException(
                [FieldError("status", f"Status must be one of: {', '.join(INQUIRY_STATUSES)}")]
            )

        inquiry.status = status
        self.db.commit()
        logger.info("Inquiry status updated: id=%s status=%s", inquiry_id, status)

        return InquiryOut.model_validate(self._require(inquiry_id))

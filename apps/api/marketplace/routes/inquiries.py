from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from marketplace.core.errors import NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_inquiry_service
from marketplace.models.user import User
from marketplace.schemas.inquiry import InquiryIn, InquiryListOut, InquiryOut, InquiryStatusIn
from marketplace.services.inquiry_service import InquiryFilters, InquiryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inquiries", tags=["inquiries"])


@router.post("", response_model=InquiryOut, status_code=status.HTTP_201_CREATED)
def create_inquiry(body: InquiryIn, service: InquiryService = Depends(get_inquiry_service)):
    # honeypot に値がある = Bot。成功したふりをして何も保存しない
    if body.website and body.website.strip():
        logger.info("Inquiry honeypot triggered; discarded")
        return JSONResponse(status_code=status.HTTP_200_OK, content={"message": "Inquiry submitted"})

    return service.create_inquiry(body)


@router.get("", response_model=InquiryListOut)
def list_inquiries(
    status_: Optional[str] = Query(default=None, alias="status"),
    vehicle_id: Optional[int] = Query(default=None, alias="vehicleId"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    service: InquiryService = Depends(get_inquiry_service),
    _: User = Depends(get_current_user),
):
    filters = InquiryFilters(status=status_ or None, vehicle_id=vehicle_id, page=page, page_size=page_size)
    return service.list_inquiries(filters)


@router.get("/{inquiry_id}", response_model=InquiryOut)
def get_inquiry(
    inquiry_id: int,
    service: InquiryService = Depends(get_inquiry_service),
    _: User = Depends(get_current_user),
):
    inquiry = service.get_inquiry(inquiry_id)
    if inquiry is None:
        raise NotFoundError(f"Inquiry with ID {inquiry_id} not found")
    return inquiry


@router.put("/{inquiry_id}", response_model=InquiryOut)
def update_inquiry_status(
    inquiry_id: int,
    body: InquiryStatusIn,
    service: InquiryService = Depends(get_inquiry_service),
    _: User = Depends(get_current_user),
):
    return service.update_inquiry_status(inquiry_id, body.status)

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from marketplace.core.errors import DomainRuleError, NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_category_service
from marketplace.models.user import User
from marketplace.schemas.category import CategoryIn, CategoryOut
from marketplace.services.category_service import CategoryService
from marketplace.services.uploads import mime_subtype

router = APIRouter(prefix="/categories", tags=["categories"])

MAX_ICON_BYTES = 1 * 1024 * 1024  # 1MB


@router.get("", response_model=List[CategoryOut])
def list_categories(service: CategoryService = Depends(get_category_service)):
    return service.list_categories()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, service: CategoryService = Depends(get_category_service)):
    category = service.get_category(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryIn,
    service: CategoryService = Depends(get_category_service),
    _: User = Depends(get_current_user),
):
    return service.create_category(body)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    body: CategoryIn,
    service: CategoryService = Depends(get_category_service),
    _: User = Depends(get_current_user),
):
    return service.update_category(category_id, body)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
    _: User = Depends(get_current_user),
):
    service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================
# icon (SVG)
# ============================================================

@router.post("/{category_id}/icon", response_model=CategoryOut)
async def upload_category_icon(
    category_id: int,
    icon: UploadFile = File(...),
    service: CategoryService = Depends(get_category_service),
    _: User = Depends(get_current_user),
):
    content = await icon.read()

    if mime_subtype(icon.content_type) != "svg+xml":
        raise DomainRuleError("Only SVG files are allowed", code="INVALID_FILE")
    if len(content) > MAX_ICON_BYTES:
        raise DomainRuleError("File size exceeds 1MB limit", code="INVALID_FILE")

    try:
        svg = content.decode("utf-8")
    except UnicodeDecodeError:
        raise DomainRuleError("SVG file must be UTF-8 encoded", code="INVALID_FILE")

    return service.update_category_icon(category_id, svg)


@router.delete("/{category_id}/icon", response_model=CategoryOut)
def delete_category_icon(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
    _: User = Depends(get_current_user),
):
    return service.delete_category_icon(category_id)

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from marketplace.core.errors import NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_page_service
from marketplace.models.user import User
from marketplace.schemas.page import FeaturedImageOut, PageIn, PageOut
from marketplace.services.page_service import PageService

router = APIRouter(prefix="/pages", tags=["pages"])


# ============================================================
# public（公開ページのみ）
# ============================================================

@router.get("", response_model=List[PageOut])
def list_published_pages(service: PageService = Depends(get_page_service)):
    return service.list_pages(published_only=True)


@router.get("/slug/{slug}", response_model=PageOut)
def get_published_page(slug: str, service: PageService = Depends(get_page_service)):
    page = service.get_page_by_slug(slug, published_only=True)
    if page is None:
        raise NotFoundError("Page not found")
    return page


@router.get("/images/{filename}")
def serve_featured_image(filename: str, service: PageService = Depends(get_page_service)):
    blob = service.get_featured_image_blob(filename)
    if blob is None:
        raise NotFoundError("Image not found")
    return Response(content=blob.data, media_type=blob.content_type, headers={"Cache-Control": "public, max-age=86400"})


# ============================================================
# admin
# ============================================================

@router.get("/admin", response_model=List[PageOut])
def list_all_pages(
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    return service.list_pages(published_only=False)


@router.get("/{page_id}", response_model=PageOut)
def get_page(
    page_id: int,
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    page = service.get_page(page_id)
    if page is None:
        raise NotFoundError("Page not found")
    return page


@router.post("", response_model=PageOut, status_code=status.HTTP_201_CREATED)
def create_page(
    body: PageIn,
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    return service.create_page(body)


@router.put("/{page_id}", response_model=PageOut)
def update_page(
    page_id: int,
    body: PageIn,
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    return service.update_page(page_id, body)


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_page(
    page_id: int,
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    service.delete_page(page_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{page_id}/featured-image", response_model=FeaturedImageOut)
async def upload_featured_image(
    page_id: int,
    image: UploadFile = File(...),
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    content = await image.read()
    page = service.set_featured_image(page_id, image.filename, image.content_type, content)
    return FeaturedImageOut(message="Featured image uploaded", image_url=page.featured_image, page=page)


@router.delete("/{page_id}/featured-image", response_model=FeaturedImageOut)
def delete_featured_image(
    page_id: int,
    service: PageService = Depends(get_page_service),
    _: User = Depends(get_current_user),
):
    page = service.clear_featured_image(page_id)
    return FeaturedImageOut(message="Featured image removed", image_url=None, page=page)

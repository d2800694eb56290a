from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from marketplace.core.errors import NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_image_service
from marketplace.models.user import User
from marketplace.schemas.image import ImageOrderIn, VehicleImageOut
from marketplace.services.image_service import ImageService

router = APIRouter(tags=["images"])

CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.post(
    "/vehicles/{vehicle_id}/images",
    response_model=VehicleImageOut,
    status_code=status.HTTP_201_CREATED,
)
async def upload_vehicle_image(
    vehicle_id: int,
    image: UploadFile = File(...),
    service: ImageService = Depends(get_image_service),
    _: User = Depends(get_current_user),
):
    content = await image.read()
    return service.upload_image(vehicle_id, image.filename, image.content_type, content)


@router.get("/vehicles/{vehicle_id}/images", response_model=List[VehicleImageOut])
def list_vehicle_images(vehicle_id: int, service: ImageService = Depends(get_image_service)):
    return service.list_vehicle_images(vehicle_id)


@router.delete("/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(
    image_id: int,
    service: ImageService = Depends(get_image_service),
    _: User = Depends(get_current_user),
):
    service.delete_image(image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/images/{image_id}/order", response_model=VehicleImageOut)
def update_image_order(
    image_id: int,
    body: ImageOrderIn,
    service: ImageService = Depends(get_image_service),
    _: User = Depends(get_current_user),
):
    return service.update_display_order(image_id, body.display_order)


# 画像配信（本体 / thumb_ 付きはサムネイル）
@router.get("/images/{filename}")
def serve_image(filename: str, service: ImageService = Depends(get_image_service)):
    blob = service.get_image_blob(filename)
    if blob is None:
        raise NotFoundError("Image not found")
    return Response(content=blob.data, media_type=blob.content_type, headers={"Cache-Control": CACHE_CONTROL})

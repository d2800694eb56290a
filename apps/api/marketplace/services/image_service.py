# marketplace/services/image_service.py
#
# 車両画像（BlobStore + vehicle_images テーブル）
# - 本体: images/<filename>
# - サムネイル: thumbnails/thumb_<filename>
# - DB書き込みに失敗したら書いたblobは StagedBlobs が消す
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from marketplace.core.errors import DomainRuleError, FieldError, NotFoundError, ValidationException
from marketplace.models.vehicle import Vehicle
from marketplace.models.vehicle_image import VehicleImage
from marketplace.schemas.common import public_url
from marketplace.schemas.image import VehicleImageOut
from marketplace.services.image_processing import InvalidImageError, process_vehicle_image
from marketplace.services.uploads import ensure_size, ensure_type, unique_name
from marketplace.storage import Blob, BlobStore, StagedBlobs

logger = logging.getLogger(__name__)

MAX_IMAGES_PER_VEHICLE = 20
ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png", "webp")
THUMB_PREFIX = "thumb_"


def image_key(filename: str) -> str:
    return f"images/{filename}"


def thumbnail_key(filename: str) -> str:
    return f"thumbnails/{THUMB_PREFIX}{filename}"


def image_to_out(image: VehicleImage) -> VehicleImageOut:
    return VehicleImageOut(
        id=image.id,
        vehicle_id=image.vehicle_id,
        filename=image.filename,
        url=public_url(image.url),
        thumbnail_url=public_url(image.thumbnail_url),
        display_order=image.display_order,
        uploaded_at=image.uploaded_at,
    )


class ImageService:
    def __init__(self, db: Session, store: BlobStore) -> None:
        self.db = db
        self.store = store

    def _require_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self.db.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle with ID {vehicle_id} not found")
        return vehicle

    def _require_image(self, image_id: int) -> VehicleImage:
        image = self.db.get(VehicleImage, image_id)
        if image is None:
            raise NotFoundError(f"Image with ID {image_id} not found")
        return image

    def _delete_blobs(self, filename: str) -> None:
        self.store.delete(image_key(filename))
        self.store.delete(thumbnail_key(filename))

    def count_images(self, vehicle_id: int) -> int:
        return self.db.execute(
            select(func.count(VehicleImage.id)).where(VehicleImage.vehicle_id == vehicle_id)
        ).scalar_one()

    def _next_display_order(self, vehicle_id: int) -> int:
        current = self.db.execute(
            select(func.max(VehicleImage.display_order)).where(VehicleImage.vehicle_id == vehicle_id)
        ).scalar_one_or_none()
        return 0 if current is None else int(current) + 1

    # ----------------------------
    # upload / delete
    # ----------------------------
    def upload_image(
        self,
        vehicle_id: int,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
    ) -> VehicleImageOut:
        ensure_size(content)
        ensure_type(
            filename,
            content_type,
            ALLOWED_IMAGE_TYPES,
            "Only image files (JPEG, PNG, WebP) are allowed",
        )
        self._require_vehicle(vehicle_id)

        if self.count_images(vehicle_id) >= MAX_IMAGES_PER_VEHICLE:
            raise DomainRuleError(
                f"Maximum {MAX_IMAGES_PER_VEHICLE} images per vehicle",
                code="IMAGE_QUOTA_EXCEEDED",
            )

        try:
            main_jpeg, thumb_jpeg = process_vehicle_image(content)
        except InvalidImageError as e:
            raise ValidationException([FieldError("image", "Invalid image file")]) from e

        name = unique_name(f"vehicle_{vehicle_id}", ".jpg")

        with StagedBlobs(self.store) as staged:
            staged.put(image_key(name), main_jpeg, "image/jpeg")
            staged.put(thumbnail_key(name), thumb_jpeg, "image/jpeg")

            image = VehicleImage(
                vehicle_id=vehicle_id,
                filename=name,
                url=f"/api/images/{name}",
                thumbnail_url=f"/api/images/{THUMB_PREFIX}{name}",
                display_order=self._next_display_order(vehicle_id),
            )
            self.db.add(image)
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            staged.commit()

        self.db.refresh(image)
        logger.info("Image uploaded: vehicle_id=%s filename=%s", vehicle_id, name)
        return image_to_out(image)

    def delete_image(self, image_id: int) -> None:
        image = self._require_image(image_id)

        self._delete_blobs(image.filename)
        self.db.delete(image)
        self.db.commit()
        logger.info("Image deleted: id=%s filename=%s", image_id, image.filename)

    def purge_vehicle_assets(self, vehicle_id: int) -> int:
        """車両に紐づく画像blobを全て削除（行は車両削除の CASCADE で消える）"""
        filenames = self.db.execute(
            select(VehicleImage.filename).where(VehicleImage.vehicle_id == vehicle_id)
        ).scalars().all()
        for name in filenames:
            self._delete_blobs(name)
        if filenames:
            logger.info("Purged %s image(s) for vehicle_id=%s", len(filenames), vehicle_id)
        return len(filenames)

    # ----------------------------
    # read / order
    # ----------------------------
    def list_vehicle_images(self, vehicle_id: int) -> List[VehicleImageOut]:
        self._require_vehicle(vehicle_id)
        rows = self.db.execute(
            select(VehicleImage)
            .where(VehicleImage.vehicle_id == vehicle_id)
            .order_by(VehicleImage.display_order.asc(), VehicleImage.id.asc())
        ).scalars().all()
        return [image_to_out(img) for img in rows]

    def update_display_order(self, image_id: int, display_order: int) -> VehicleImageOut:
        if display_order < 0:
            raise ValidationException([FieldError("displayOrder", "Display order must be 0 or greater")])
        image = self._require_image(image_id)
        image.display_order = display_order
        self.db.commit()
        self.db.refresh(image)
        return image_to_out(image)

    def get_image_blob(self, filename: str) -> Optional[Blob]:
        """/api/images/<filename> 用。thumb_ で始まればサムネイル"""
        key = f"thumbnails/{filename}" if filename.startswith(THUMB_PREFIX) else image_key(filename)
        try:
            return self.store.get(key)
        except ValueError:
            return None

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.db.session import get_db
from marketplace.services.auth_service import AuthService
from marketplace.services.category_service import CategoryService
from marketplace.services.document_service import DocumentService
from marketplace.services.image_service import ImageService
from marketplace.services.inquiry_service import InquiryService
from marketplace.services.page_service import PageService
from marketplace.services.vehicle_service import VehicleService
from marketplace.storage import BlobStore, LocalBlobStore


@lru_cache
def get_blob_store() -> BlobStore:
    # テストでは app.dependency_overrides で差し替える
    return LocalBlobStore(settings.UPLOAD_DIR)


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_vehicle_service(db: Session = Depends(get_db)) -> VehicleService:
    return VehicleService(db)


def get_image_service(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> ImageService:
    return ImageService(db, store)


def get_inquiry_service(db: Session = Depends(get_db)) -> InquiryService:
    return InquiryService(db)


def get_page_service(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> PageService:
    return PageService(db, store)


def get_document_service(store: BlobStore = Depends(get_blob_store)) -> DocumentService:
    return DocumentService(store)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)

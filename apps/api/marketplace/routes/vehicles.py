from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from marketplace.core.errors import NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_image_service, get_vehicle_service
from marketplace.models.user import User
from marketplace.schemas.vehicle import VehicleIn, VehicleListOut, VehicleOut
from marketplace.services.image_service import ImageService
from marketplace.services.vehicle_service import VehicleFilters, VehicleService

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


# ============================================================
# public
# ============================================================

@router.get("", response_model=VehicleListOut)
def list_vehicles(
    category: Optional[str] = Query(default=None),
    min_price: Optional[int] = Query(default=None, alias="minPrice"),
    max_price: Optional[int] = Query(default=None, alias="maxPrice"),
    min_year: Optional[int] = Query(default=None, alias="minYear"),
    max_year: Optional[int] = Query(default=None, alias="maxYear"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    service: VehicleService = Depends(get_vehicle_service),
):
    filters = VehicleFilters(
        category=category or None,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        page=page,
        page_size=page_size,
    )
    return service.list_vehicles(filters)


# /{vehicle_id} より前に定義すること
@router.get("/search", response_model=List[VehicleOut])
def search_vehicles(
    q: Optional[str] = Query(default=None),
    service: VehicleService = Depends(get_vehicle_service),
):
    return service.search_vehicles(q)


@router.get("/{vehicle_id}", response_model=VehicleOut)
def get_vehicle(vehicle_id: int, service: VehicleService = Depends(get_vehicle_service)):
    vehicle = service.get_vehicle(vehicle_id)
    if vehicle is None:
        raise NotFoundError(f"Vehicle with ID {vehicle_id} not found")
    return vehicle


@router.get("/{vehicle_id}/related", response_model=List[VehicleOut])
def get_related_vehicles(
    vehicle_id: int,
    limit: int = Query(default=4, ge=1, le=20),
    service: VehicleService = Depends(get_vehicle_service),
):
    return service.get_related_vehicles(vehicle_id, limit=limit)


# ============================================================
# admin
# ============================================================

@router.post("", response_model=VehicleOut, status_code=status.HTTP_201_CREATED)
def create_vehicle(
    body: VehicleIn,
    service: VehicleService = Depends(get_vehicle_service),
    _: User = Depends(get_current_user),
):
    return service.create_vehicle(body)


@router.put("/{vehicle_id}", response_model=VehicleOut)
def update_vehicle(
    vehicle_id: int,
    body: VehicleIn,
    service: VehicleService = Depends(get_vehicle_service),
    _: User = Depends(get_current_user),
):
    return service.update_vehicle(vehicle_id, body)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vehicle(
    vehicle_id: int,
    service: VehicleService = Depends(get_vehicle_service),
    images: ImageService = Depends(get_image_service),
    _: User = Depends(get_current_user),
):
    if service.get_vehicle(vehicle_id) is None:
        raise NotFoundError(f"Vehicle with ID {vehicle_id} not found")

    # 画像行は CASCADE で消えるので、先にファイル本体を消しておく
    images.purge_vehicle_assets(vehicle_id)
    service.delete_vehicle(vehicle_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

import io

import pytest
from PIL import Image

from marketplace.core.errors import DomainRuleError, NotFoundError, ValidationException
from marketplace.models.vehicle_image import VehicleImage
from marketplace.services.image_service import MAX_IMAGES_PER_VEHICLE, ImageService
from marketplace.services.vehicle_service import VehicleService


def _upload(service, vehicle_id, content, filename="truck.png", content_type="image/png"):
    return service.upload_image(vehicle_id, filename, content_type, content)


def test_upload_stores_image_and_thumbnail(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    image = _upload(service, vehicle.id, png_bytes)

    assert image.filename.startswith(f"vehicle_{vehicle.id}_")
    assert image.filename.endswith(".jpg")
    assert image.url == f"/api/images/{image.filename}"
    assert image.thumbnail_url == f"/api/images/thumb_{image.filename}"
    assert image.display_order == 0

    main = blob_store.get(f"images/{image.filename}")
    thumb = blob_store.get(f"thumbnails/thumb_{image.filename}")
    assert main.content_type == "image/jpeg"
    assert Image.open(io.BytesIO(main.data)).format == "JPEG"
    assert Image.open(io.BytesIO(thumb.data)).size == (300, 200)


def test_display_order_increments(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    first = _upload(service, vehicle.id, png_bytes)
    second = _upload(service, vehicle.id, png_bytes)
    service.update_display_order(first.id, 7)
    third = _upload(service, vehicle.id, png_bytes)

    assert second.display_order == 1
    assert third.display_order == 8
    assert [i.id for i in service.list_vehicle_images(vehicle.id)] == [second.id, first.id, third.id]


def test_accepts_jpeg_and_webp(db_session, blob_store, make_vehicle, image_factory):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    _upload(service, vehicle.id, image_factory("JPEG"), filename="a.jpeg", content_type="image/jpeg")
    # 拡張子が無くても MIME サブタイプで判定
    _upload(service, vehicle.id, image_factory("WEBP"), filename="blob", content_type="image/webp")
    assert service.count_images(vehicle.id) == 2


def test_quota(db_session, blob_store, make_vehicle, image_factory):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)
    small = image_factory("PNG", size=(40, 30))

    for _ in range(MAX_IMAGES_PER_VEHICLE):
        _upload(service, vehicle.id, small)

    with pytest.raises(DomainRuleError) as exc_info:
        _upload(service, vehicle.id, small)
    assert exc_info.value.code == "IMAGE_QUOTA_EXCEEDED"
    assert service.count_images(vehicle.id) == MAX_IMAGES_PER_VEHICLE


def test_rejects_wrong_type_and_size(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    with pytest.raises(DomainRuleError) as exc_info:
        _upload(service, vehicle.id, png_bytes, filename="doc.pdf", content_type="application/pdf")
    assert exc_info.value.code == "INVALID_FILE"

    with pytest.raises(DomainRuleError):
        _upload(service, vehicle.id, b"x" * (10 * 1024 * 1024 + 1))


def test_undecodable_bytes_are_a_field_error(db_session, blob_store, make_vehicle):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    with pytest.raises(ValidationException) as exc_info:
        _upload(service, vehicle.id, b"definitely not a png")
    assert [e.field for e in exc_info.value.errors] == ["image"]
    assert blob_store.blobs == {}


def test_upload_for_missing_vehicle(db_session, blob_store, png_bytes):
    with pytest.raises(NotFoundError):
        _upload(ImageService(db_session, blob_store), 999999, png_bytes)


def test_failed_metadata_write_removes_blobs(db_session, blob_store, make_vehicle, png_bytes, monkeypatch):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)

    def _boom():
        raise RuntimeError("disk full")

    monkeypatch.setattr(db_session, "commit", _boom)

    with pytest.raises(RuntimeError, match="disk full"):
        _upload(service, vehicle.id, png_bytes)

    monkeypatch.undo()
    assert blob_store.blobs == {}
    assert service.count_images(vehicle.id) == 0


def test_delete_image_removes_blobs(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)
    image = _upload(service, vehicle.id, png_bytes)

    service.delete_image(image.id)

    assert blob_store.blobs == {}
    assert db_session.get(VehicleImage, image.id) is None
    with pytest.raises(NotFoundError):
        service.delete_image(image.id)
    # blob の二重削除はエラーにならない
    blob_store.delete(f"images/{image.filename}")


def test_vehicle_delete_cascades_to_images(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    images = ImageService(db_session, blob_store)
    _upload(images, vehicle.id, png_bytes)
    _upload(images, vehicle.id, png_bytes)

    assert images.purge_vehicle_assets(vehicle.id) == 2
    VehicleService(db_session).delete_vehicle(vehicle.id)

    assert blob_store.blobs == {}
    assert db_session.query(VehicleImage).filter_by(vehicle_id=vehicle.id).count() == 0


def test_vehicle_is_hydrated_with_images(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    images = ImageService(db_session, blob_store)
    first = _upload(images, vehicle.id, png_bytes)
    second = _upload(images, vehicle.id, png_bytes)
    images.update_display_order(first.id, 5)

    hydrated = VehicleService(db_session).get_vehicle(vehicle.id)
    assert [i.id for i in hydrated.images] == [second.id, first.id]


def test_get_image_blob_resolves_thumbnails(db_session, blob_store, make_vehicle, png_bytes):
    vehicle = make_vehicle()
    service = ImageService(db_session, blob_store)
    image = _upload(service, vehicle.id, png_bytes)

    assert service.get_image_blob(image.filename) is not None
    assert service.get_image_blob(f"thumb_{image.filename}") is not None
    assert service.get_image_blob("missing.jpg") is None

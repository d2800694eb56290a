import pytest

from marketplace.core.errors import DomainRuleError, NotFoundError, ValidationException
from marketplace.schemas.inquiry import InquiryIn
from marketplace.services.inquiry_service import InquiryFilters, InquiryService
from marketplace.services.vehicle_service import VehicleService


def _inquiry(vehicle_id, **overrides):
    data = {
        "vehicleId": vehicle_id,
        "customerName": "佐藤花子",
        "customerEmail": "hanako@example.com",
        "message": "在庫はありますか？",
        "inquiryType": "email",
    }
    data.update(overrides)
    return InquiryIn.model_validate(data)


def test_create_inquiry(db_session, make_vehicle):
    vehicle = make_vehicle()
    inquiry = InquiryService(db_session).create_inquiry(_inquiry(vehicle.id, customerPhone="  "))

    assert inquiry.id > 0
    assert inquiry.status == "new"
    assert inquiry.vehicle_id == vehicle.id
    # 空白だけの電話番号は保存しない
    assert inquiry.customer_phone is None


def test_create_inquiry_for_missing_vehicle(db_session):
    with pytest.raises(DomainRuleError) as exc_info:
        InquiryService(db_session).create_inquiry(_inquiry(424242))
    assert exc_info.value.code == "INVALID_VEHICLE"


def test_create_inquiry_validation(db_session, make_vehicle):
    vehicle = make_vehicle()
    with pytest.raises(ValidationException) as exc_info:
        InquiryService(db_session).create_inquiry(
            _inquiry(vehicle.id, customerEmail=None, customerName="", inquiryType="fax")
        )
    fields = {e.field for e in exc_info.value.errors}
    assert fields == {"customerName", "customerEmail", "customerPhone", "inquiryType"}


def test_list_and_filter(db_session, make_vehicle):
    service = InquiryService(db_session)
    a = make_vehicle()
    b = make_vehicle(model="フォワード")
    first = service.create_inquiry(_inquiry(a.id))
    service.create_inquiry(_inquiry(b.id, inquiryType="phone", customerPhone="03-0000-0000"))
    service.create_inquiry(_inquiry(a.id, inquiryType="line"))
    service.update_inquiry_status(first.id, "contacted")

    everything = service.list_inquiries(InquiryFilters())
    assert everything.total_count == 3
    assert everything.items[-1].id == first.id

    by_vehicle = service.list_inquiries(InquiryFilters(vehicle_id=a.id))
    assert by_vehicle.total_count == 2

    contacted = service.list_inquiries(InquiryFilters(status="contacted"))
    assert [i.id for i in contacted.items] == [first.id]

    paged = service.list_inquiries(InquiryFilters(page=2, page_size=2))
    assert len(paged.items) == 1
    assert paged.total_count == 3


def test_status_update_rules(db_session, make_vehicle):
    service = InquiryService(db_session)
    inquiry = service.create_inquiry(_inquiry(make_vehicle().id))

    assert service.update_inquiry_status(inquiry.id, "closed").status == "closed"

    with pytest.raises(ValidationException) as exc_info:
        service.update_inquiry_status(inquiry.id, "archived")
    assert exc_info.value.errors[0].field == "status"
    assert service.get_inquiry(inquiry.id).status == "closed"

    with pytest.raises(NotFoundError):
        service.update_inquiry_status(999999, "closed")


def test_inquiry_survives_vehicle_delete(db_session, make_vehicle):
    service = InquiryService(db_session)
    vehicle = make_vehicle()
    inquiry = service.create_inquiry(_inquiry(vehicle.id))

    VehicleService(db_session).delete_vehicle(vehicle.id)

    db_session.expire_all()
    kept = service.get_inquiry(inquiry.id)
    assert kept is not None
    assert kept.vehicle_id is None

# marketplace/services/validation.py
#
# 入力チェック（純粋関数）
# - 例外は投げず、{field, message} のリストを返す
# - 1回のレスポンスで全フィールドのエラーを返せるよう、途中で止めない
# - *_or_raise は同じチェックをして ValidationException を投げる版
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Mapping

from marketplace.core.errors import FieldError, ValidationException
from marketplace.models.inquiry import INQUIRY_TYPES

MIN_VEHICLE_YEAR = 1990
MAX_MAKE_MODEL_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 2000
MAX_CUSTOMER_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 1000

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _too_long(value: Any, limit: int) -> bool:
    return isinstance(value, str) and len(value) > limit


def validate_vehicle_input(data: Mapping[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []
    current_year = datetime.now().year
    max_year = current_year + 1
    year_message = f"Year must be between {MIN_VEHICLE_YEAR} and {max_year}"

    year = data.get("year")
    if not _is_number(year):
        errors.append(FieldError("year", year_message))
    else:
        # 下限・上限は別々に判定
        if year < MIN_VEHICLE_YEAR:
            errors.append(FieldError("year", year_message))
        if year > max_year:
            errors.append(FieldError("year", year_message))

    price = data.get("price")
    if not _is_number(price) or price <= 0:
        errors.append(FieldError("price", "Price must be greater than 0"))

    mileage = data.get("mileage")
    if not _is_number(mileage) or mileage < 0:
        errors.append(FieldError("mileage", "Mileage must be greater than or equal to 0"))

    make = data.get("make")
    if not _has_text(make):
        errors.append(FieldError("make", "Make is required"))
    if _too_long(make, MAX_MAKE_MODEL_LENGTH):
        errors.append(FieldError("make", f"Make must not exceed {MAX_MAKE_MODEL_LENGTH} characters"))

    model = data.get("model")
    if not _has_text(model):
        errors.append(FieldError("model", "Model is required"))
    if _too_long(model, MAX_MAKE_MODEL_LENGTH):
        errors.append(FieldError("model", f"Model must not exceed {MAX_MAKE_MODEL_LENGTH} characters"))

    if _too_long(data.get("description_ja"), MAX_DESCRIPTION_LENGTH):
        errors.append(
            FieldError("descriptionJa", f"Japanese description must not exceed {MAX_DESCRIPTION_LENGTH} characters")
        )
    if _too_long(data.get("description_en"), MAX_DESCRIPTION_LENGTH):
        errors.append(
            FieldError("descriptionEn", f"English description must not exceed {MAX_DESCRIPTION_LENGTH} characters")
        )

    return errors


def validate_vehicle_input_or_raise(data: Mapping[str, Any]) -> None:
    errors = validate_vehicle_input(data)
    if errors:
        raise ValidationException(errors)


def validate_inquiry_input(data: Mapping[str, Any]) -> List[FieldError]:
    errors: List[FieldError] = []

    customer_name = data.get("customer_name")
    if not _has_text(customer_name):
        errors.append(FieldError("customerName", "Customer name is required"))
    if _too_long(customer_name, MAX_CUSTOMER_NAME_LENGTH):
        errors.append(
            FieldError("customerName", f"Customer name must not exceed {MAX_CUSTOMER_NAME_LENGTH} characters")
        )

    # メール・電話のどちらか必須
    email = data.get("customer_email")
    has_email = _has_text(email)
    has_phone = _has_text(data.get("customer_phone"))
    if not has_email and not has_phone:
        errors.append(FieldError("customerEmail", "Either email or phone number is required"))
        errors.append(FieldError("customerPhone", "Either email or phone number is required"))

    if has_email and not EMAIL_RE.match(email):
        errors.append(FieldError("customerEmail", "Invalid email format"))

    message = data.get("message")
    if not _has_text(message):
        errors.append(FieldError("message", "Message is required"))
    if _too_long(message, MAX_MESSAGE_LENGTH):
        errors.append(FieldError("message", f"Message must not exceed {MAX_MESSAGE_LENGTH} characters"))

    vehicle_id = data.get("vehicle_id")
    if not isinstance(vehicle_id, int) or isinstance(vehicle_id, bool) or vehicle_id <= 0:
        errors.append(FieldError("vehicleId", "Valid vehicle ID is required"))

    if data.get("inquiry_type") not in INQUIRY_TYPES:
        errors.append(FieldError("inquiryType", f"Inquiry type must be one of: {', '.join(INQUIRY_TYPES)}"))

    return errors


def validate_inquiry_input_or_raise(data: Mapping[str, Any]) -> None:
    errors = validate_inquiry_input(data)
    if errors:
        raise ValidationException(errors)

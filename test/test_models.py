import uuid

import pytest
from pydantic import ValidationError as PydanticValidationError

from _helper import make_order
from tailorshop.errors import ValidationError
from tailorshop.models import InventoryItem, Measurement, check_measurements, normalize_phone
from tailorshop.routes.admin_customers import CustomerBody


def test_normalize_phone_strips_formatting():
    assert normalize_phone("+91 98765-43210") == "919876543210"
    assert normalize_phone("(555) 123 4567") == "5551234567"


@pytest.mark.parametrize("phone", ["", None, "12345", "1234567890123456", "phone"])
def test_normalize_phone_rejects_bad_length(phone):
    with pytest.raises(ValidationError):
        normalize_phone(phone)


def test_duplicate_measurement_types_rejected():
    with pytest.raises(ValueError):
        check_measurements([Measurement(type="shirt"), Measurement(type="shirt")])


def test_customer_body_rejects_duplicate_measurements():
    with pytest.raises(PydanticValidationError):
        CustomerBody.model_validate({
            "name": "Asha",
            "phone": "9876543210",
            "measurements": [{"type": "pant", "waist": 32}, {"type": "pant", "waist": 34}],
        })


def test_measurement_json_uses_camel_case():
    m = Measurement.model_validate({"type": "kurta", "sleeveLength": 24, "notes": "  loose fit "})
    data = m.to_json()
    assert data["sleeveLength"] == 24
    assert data["notes"] == "loose fit"


def test_order_json_includes_derived_fields():
    data = make_order(price=1200, advance_paid=200, status="Cutting").to_json()
    assert data["balanceDue"] == 1000
    assert data["statusIndex"] == 1
    assert data["orderNumber"] == "1A"
    assert data["cuttingStatus"] == "Pending"


def _item(quantity, threshold=10):
    return InventoryItem(
        id=uuid.uuid4(),
        shop_id=uuid.uuid4(),
        item_name="Buttons",
        quantity=quantity,
        unit="pieces",
        low_stock_threshold=threshold,
    )


def test_low_stock_is_inclusive():
    assert _item(10).is_low_stock
    assert _item(0).is_low_stock
    assert not _item(11).is_low_stock
    assert _item(3, threshold=3).to_json()["isLowStock"] is True

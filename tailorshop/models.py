"""
Entity models. Field names match the table columns; JSON uses camelCase
aliases for the mobile client.
"""
import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from tailorshop import order_state
from tailorshop.errors import ValidationError
from tailorshop.order_state import CUTTING_PENDING, ORDER_PLACED

MEASUREMENT_TYPES = (
    "pant", "shirt", "coat", "jacket", "kurta",
    "salwar", "sherwani", "lehenga", "saree", "other",
)
MeasurementType = Literal[
    "pant", "shirt", "coat", "jacket", "kurta",
    "salwar", "sherwani", "lehenga", "saree", "other",
]
GarmentType = Literal["Suit", "Shirt", "Kurta", "Other"]
InventoryUnit = Literal["pieces", "boxes", "meters"]

PHONE_RE = re.compile(r"^\d{10,15}$")


def normalize_phone(phone: str | None) -> str:
    """Strip everything but digits; 10-15 digits required."""
    digits = re.sub(r"\D", "", phone or "")
    if not PHONE_RE.match(digits):
        raise ValidationError("Invalid phone number (10-15 digits required)")
    return digits


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Measurement(CamelModel):
    type: MeasurementType
    # Common
    length: float | None = None
    shoulder: float | None = None
    chest: float | None = None
    waist: float | None = None
    hip: float | None = None
    neck: float | None = None
    # Pant / Salwar
    thigh: float | None = None
    knee: float | None = None
    bottom: float | None = None
    crotch: float | None = None
    # Shirt / Kurta / Coat / Sherwani
    sleeve_length: float | None = None
    bicep: float | None = None
    collar: float | None = None
    cuff: float | None = None
    armhole: float | None = None
    cross_back: float | None = None
    # Jacket
    sleeve: float | None = None
    # Kurta
    slits: float | None = None
    # Lehenga
    skirt_length: float | None = None
    skirt_waist: float | None = None
    skirt_hip: float | None = None
    # Blouse (lehenga / saree)
    blouse_length: float | None = None
    blouse_chest: float | None = None
    blouse_underbust: float | None = None
    blouse_shoulder: float | None = None
    blouse_sleeve: float | None = None
    # Petticoat (saree)
    petticoat_length: float | None = None
    petticoat_waist: float | None = None
    notes: str = ""

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, v: str) -> str:
        return v.strip()


def check_measurements(measurements: list[Measurement]) -> list[Measurement]:
    """At most one entry per garment type in a single submission."""
    seen: set[str] = set()
    for m in measurements:
        if m.type in seen:
            raise ValueError(f"Duplicate measurement type: {m.type}")
        seen.add(m.type)
    return measurements


class Shop(CamelModel):
    id: uuid.UUID
    shop_name: str
    shop_code: str
    phone: str = ""
    address: str = ""
    created_at: datetime | None = None


class StaffMember(CamelModel):
    """Admin, tailor or cutting master account. Admins have an empty name."""
    id: uuid.UUID
    shop_id: uuid.UUID
    username: str
    name: str = ""
    password_hash: str = Field(default="", exclude=True)
    created_at: datetime | None = None


class CustomerRef(CamelModel):
    id: uuid.UUID
    name: str
    phone: str


class Customer(CamelModel):
    id: uuid.UUID
    shop_id: uuid.UUID
    name: str
    phone: str
    notes: str = ""
    measurements: list[Measurement] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Order(CamelModel):
    id: uuid.UUID
    shop_id: uuid.UUID
    customer_id: uuid.UUID
    order_number: str
    garment_type: GarmentType
    description: str = ""
    status: str = ORDER_PLACED
    price: float = 0
    advance_paid: float = 0
    due_date: datetime | None = None
    is_active: bool = True
    ready_photo_url: str | None = None
    pending_ready_photo: str | None = None
    pending_approval: bool = False
    assigned_tailor_id: uuid.UUID | None = None
    assigned_cutting_master_id: uuid.UUID | None = None
    cutting_status: str = CUTTING_PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Joined from customers on reads; never written back.
    customer: CustomerRef | None = None

    @computed_field(alias="balanceDue")
    @property
    def balance_due(self) -> float:
        return order_state.balance_due(self)

    @computed_field(alias="statusIndex")
    @property
    def status_index(self) -> int:
        return order_state.status_index(self.status)


# Columns an order mutation may write back.
ORDER_MUTABLE_COLUMNS = (
    "garment_type",
    "description",
    "status",
    "price",
    "advance_paid",
    "due_date",
    "is_active",
    "ready_photo_url",
    "pending_ready_photo",
    "pending_approval",
    "assigned_tailor_id",
    "assigned_cutting_master_id",
    "cutting_status",
)


class InventoryItem(CamelModel):
    id: uuid.UUID
    shop_id: uuid.UUID
    item_name: str
    quantity: int = 0
    unit: InventoryUnit
    low_stock_threshold: int = 10
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field(alias="isLowStock")
    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

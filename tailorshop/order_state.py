"""
Order lifecycle. Statuses are ordered for progress display, but any status may
be written directly: there is no transition guard. The rules below are the only
side effects attached to status changes.
"""
from enum import Enum

from tailorshop.errors import InvalidValueError, NoPendingApprovalError, ValidationError


class Role(str, Enum):
    ADMIN = "admin"
    TAILOR = "tailor"
    CUTTING_MASTER = "cuttingMaster"


ORDER_PLACED = "OrderPlaced"
CUTTING = "Cutting"
IN_STITCHING = "InStitching"
FINAL_TOUCHES = "FinalTouches"
READY_FOR_PICKUP = "ReadyForPickup"

ORDER_STATUSES: tuple[str, ...] = (
    ORDER_PLACED,
    CUTTING,
    IN_STITCHING,
    FINAL_TOUCHES,
    READY_FOR_PICKUP,
)
IN_PROGRESS_STATUSES = (CUTTING, IN_STITCHING, FINAL_TOUCHES)

STATUS_LABELS: dict[str, str] = {
    ORDER_PLACED: "Order Placed",
    CUTTING: "Cutting",
    IN_STITCHING: "In Stitching",
    FINAL_TOUCHES: "Final Touches",
    READY_FOR_PICKUP: "Ready for Pickup",
}

STATUS_COLORS: dict[str, str] = {
    ORDER_PLACED: "gray",
    CUTTING: "yellow",
    IN_STITCHING: "blue",
    FINAL_TOUCHES: "orange",
    READY_FOR_PICKUP: "green",
}

CUTTING_PENDING = "Pending"
CUTTING_DONE = "Done"
CUTTING_STATUSES: tuple[str, ...] = (CUTTING_PENDING, CUTTING_DONE)


def status_index(status: str | None) -> int:
    """Position in ORDER_STATUSES, -1 when unknown."""
    try:
        return ORDER_STATUSES.index(status)
    except ValueError:
        return -1


def balance_due(order) -> float:
    # No floor: an advance larger than the price yields a negative balance.
    return order.price - order.advance_paid


def validate_status(status: str | None) -> str:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status. Allowed: {', '.join(ORDER_STATUSES)}")
    return status


def transition_to_ready(order, role: Role, photo_url: str | None):
    """
    Mark order ready. A photo is required. Tailors only submit it for approval:
    status and readyPhotoUrl stay as they are until an admin approves.
    """
    if not photo_url:
        raise ValidationError(f"Photo is required for {READY_FOR_PICKUP} status")
    if role == Role.TAILOR:
        return order.model_copy(update={
            "pending_approval": True,
            "pending_ready_photo": photo_url,
        })
    return order.model_copy(update={
        "status": READY_FOR_PICKUP,
        "ready_photo_url": photo_url,
        "pending_approval": False,
        "pending_ready_photo": None,
    })


def set_status(order, role: Role, status: str | None, photo_url: str | None = None):
    status = validate_status(status)
    if status == READY_FOR_PICKUP:
        return transition_to_ready(order, role, photo_url)
    return order.model_copy(update={"status": status})


def approve_pending(order, approved: bool):
    if not order.pending_approval:
        raise NoPendingApprovalError()
    update = {"pending_approval": False, "pending_ready_photo": None}
    if approved:
        update["status"] = READY_FOR_PICKUP
        update["ready_photo_url"] = order.pending_ready_photo
    return order.model_copy(update=update)


def set_cutting_status(order, cutting_status: str | None):
    if cutting_status not in CUTTING_STATUSES:
        raise InvalidValueError(
            f"Invalid cutting status. Must be {' or '.join(CUTTING_STATUSES)}."
        )
    return order.model_copy(update={"cutting_status": cutting_status})


def assign_tailor(order, tailor_id):
    return order.model_copy(update={"assigned_tailor_id": tailor_id})


def assign_cutting_master(order, cutting_master_id):
    return order.model_copy(update={"assigned_cutting_master_id": cutting_master_id})


def set_active(order, is_active: bool):
    return order.model_copy(update={"is_active": is_active})

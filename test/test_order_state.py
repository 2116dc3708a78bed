import pytest

from _helper import make_order
from tailorshop import order_state
from tailorshop.errors import InvalidValueError, NoPendingApprovalError, StateError, ValidationError
from tailorshop.order_state import CUTTING, CUTTING_DONE, ORDER_PLACED, READY_FOR_PICKUP, Role


def test_balance_due():
    assert order_state.balance_due(make_order(price=500, advance_paid=150)) == 350
    assert make_order(price=500, advance_paid=150).balance_due == 350


def test_balance_due_can_go_negative():
    assert order_state.balance_due(make_order(price=100, advance_paid=150)) == -50


def test_status_index():
    assert order_state.status_index(ORDER_PLACED) == 0
    assert order_state.status_index("Cutting") == 1
    assert order_state.status_index(READY_FOR_PICKUP) == 4
    assert order_state.status_index("Unknown") == -1
    assert order_state.status_index(None) == -1


def test_validate_status_lists_allowed_values():
    assert order_state.validate_status(CUTTING) == CUTTING
    with pytest.raises(ValidationError) as exc:
        order_state.validate_status("Shipped")
    assert "OrderPlaced" in exc.value.message
    assert "ReadyForPickup" in exc.value.message


def test_any_status_may_be_set_directly():
    order = make_order(status="FinalTouches")
    assert order_state.set_status(order, Role.ADMIN, ORDER_PLACED).status == ORDER_PLACED


def test_ready_requires_photo():
    with pytest.raises(ValidationError):
        order_state.set_status(make_order(), Role.ADMIN, READY_FOR_PICKUP)
    with pytest.raises(ValidationError):
        order_state.set_status(make_order(), Role.TAILOR, READY_FOR_PICKUP, "")


def test_admin_marks_ready_directly():
    order = order_state.set_status(make_order(), Role.ADMIN, READY_FOR_PICKUP, "/uploads/p.jpg")
    assert order.status == READY_FOR_PICKUP
    assert order.ready_photo_url == "/uploads/p.jpg"
    assert order.pending_approval is False


def test_tailor_ready_goes_to_approval():
    order = make_order(status=CUTTING)
    updated = order_state.set_status(order, Role.TAILOR, READY_FOR_PICKUP, "/uploads/p.jpg")
    assert updated.status == CUTTING
    assert updated.ready_photo_url is None
    assert updated.pending_approval is True
    assert updated.pending_ready_photo == "/uploads/p.jpg"
    # Pure: the input is untouched
    assert order.pending_approval is False


def test_approve_pending():
    pending = make_order(status=CUTTING, pending_approval=True, pending_ready_photo="/uploads/p.jpg")
    approved = order_state.approve_pending(pending, True)
    assert approved.status == READY_FOR_PICKUP
    assert approved.ready_photo_url == "/uploads/p.jpg"
    assert approved.pending_approval is False
    assert approved.pending_ready_photo is None


def test_reject_pending():
    pending = make_order(status=CUTTING, pending_approval=True, pending_ready_photo="/uploads/p.jpg")
    rejected = order_state.approve_pending(pending, False)
    assert rejected.status == CUTTING
    assert rejected.ready_photo_url is None
    assert rejected.pending_approval is False
    assert rejected.pending_ready_photo is None


def test_approve_without_pending_fails():
    with pytest.raises(NoPendingApprovalError) as exc:
        order_state.approve_pending(make_order(), True)
    assert isinstance(exc.value, StateError)
    assert exc.value.status_code == 409


def test_cutting_status():
    order = make_order(status=ORDER_PLACED)
    updated = order_state.set_cutting_status(order, CUTTING_DONE)
    assert updated.cutting_status == CUTTING_DONE
    # Cutting progress never moves the main status
    assert updated.status == ORDER_PLACED


def test_invalid_cutting_status():
    with pytest.raises(InvalidValueError) as exc:
        order_state.set_cutting_status(make_order(), "Half")
    assert exc.value.status_code == 400

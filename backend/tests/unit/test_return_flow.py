"""
Unit tests for returns: initiation, admin processing and the booking/return
request dual write.
"""
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from tailorbook.api.middleware.error_handler import ForbiddenException, ValidationException
from tailorbook.models import Booking, BookingStatus, ReturnRequest, ReturnStatus
from tailorbook.services.errors import (
    BookingNotFound,
    ConsistencyFailure,
    DuplicateReturnRequest,
    IneligibleForReturn,
    InvalidStatusValue,
    InvalidTransition,
)


def _returns(session, booking_id):
    session.expire_all()
    stmt = select(ReturnRequest).where(ReturnRequest.booking_id == booking_id)
    return session.execute(stmt).scalars().all()


@pytest.mark.unit
def test_initiate_return_on_delivered_booking(service, make_booking, customer_actor, metrics):
    booking = make_booking("delivered")

    booking, return_request = service.initiate_return(customer_actor, booking.id, "  wrong size ")

    assert booking.status.value == "return_pending"
    assert booking.admin_message == "Return requested by customer. Reason: wrong size"
    assert return_request.booking_id == booking.id
    assert return_request.customer_id == customer_actor.id
    assert return_request.return_reason == "wrong size"
    assert return_request.status == ReturnStatus.RETURN_PENDING
    assert return_request.admin_notes == ""
    assert return_request.refund_amount == Decimal("0")
    assert return_request.request_date is not None
    assert metrics.get_counter_value("return_requests_total") == 1
    assert metrics.get_counter_value(
        "booking_transitions_total", {"from_status": "delivered", "to_status": "return_pending"}
    ) == 1


@pytest.mark.unit
@pytest.mark.parametrize("status", ["pending", "confirmed", "completed", "rejected"])
def test_return_requires_delivered(service, make_booking, customer_actor, db_session, status):
    booking = make_booking(status)

    with pytest.raises(IneligibleForReturn) as exc_info:
        service.initiate_return(customer_actor, booking.id, "changed my mind")

    assert exc_info.value.status_code == 400
    assert exc_info.value.details["current_status"] == status
    assert _returns(db_session, booking.id) == []


@pytest.mark.unit
@pytest.mark.parametrize("reason", [None, "", "   "])
def test_return_requires_reason(service, make_booking, customer_actor, reason):
    booking = make_booking("delivered")

    with pytest.raises(ValidationException):
        service.initiate_return(customer_actor, booking.id, reason)


@pytest.mark.unit
def test_return_on_someone_elses_booking(service, make_booking, other_customer_actor, db_session):
    booking = make_booking("delivered")

    with pytest.raises(BookingNotFound):
        service.initiate_return(other_customer_actor, booking.id, "wrong size")

    assert _returns(db_session, booking.id) == []


@pytest.mark.unit
def test_return_on_missing_booking(service, customer_actor):
    with pytest.raises(BookingNotFound):
        service.initiate_return(customer_actor, uuid4(), "wrong size")


@pytest.mark.unit
def test_second_return_is_rejected(service, make_booking, customer_actor, db_session):
    booking = make_booking("delivered")
    service.initiate_return(customer_actor, booking.id, "wrong size")

    # Booking is no longer delivered, so eligibility fails first
    with pytest.raises(IneligibleForReturn):
        service.initiate_return(customer_actor, booking.id, "wrong colour")

    assert len(_returns(db_session, booking.id)) == 1


@pytest.mark.unit
def test_duplicate_active_return_detected(service, make_booking, customer_actor, db_session):
    booking = make_booking("delivered")
    db_session.add(ReturnRequest(
        booking_id=booking.id,
        customer_id=customer_actor.id,
        return_reason="left over from a retry",
        status=ReturnStatus.RETURN_APPROVED,
    ))
    db_session.commit()

    with pytest.raises(DuplicateReturnRequest) as exc_info:
        service.initiate_return(customer_actor, booking.id, "wrong size")

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["existing_status"] == "return_approved"
    assert db_session.get(Booking, booking.id).status == BookingStatus.DELIVERED


@pytest.mark.unit
def test_full_return_round_trip(service, make_booking, customer_actor, admin_actor, db_session):
    booking = make_booking()
    assert booking.status.value == "pending"

    for step in ("confirmed", "completed", "delivered"):
        booking = service.admin_transition(admin_actor, booking.id, step)
        assert booking.status.value == step

    booking, return_request = service.initiate_return(customer_actor, booking.id, "wrong size")
    assert booking.status.value == "return_pending"
    assert return_request.status.value == "return_pending"

    booking = service.admin_transition(admin_actor, booking.id, "return_approved", "Pickup tomorrow")
    db_session.refresh(return_request)
    assert booking.status.value == "return_approved"
    assert booking.admin_message == "Pickup tomorrow"
    assert return_request.status.value == "return_approved"
    assert return_request.admin_notes == "Pickup tomorrow"

    booking = service.admin_transition(
        admin_actor, booking.id, "return_completed", "Refunded", refund_amount=Decimal("2499.00")
    )
    db_session.refresh(return_request)
    assert booking.status.value == "return_completed"
    assert return_request.status.value == "return_completed"
    assert return_request.refund_amount == Decimal("2499.00")

    for target in BookingStatus:
        with pytest.raises(InvalidTransition):
            service.admin_transition(admin_actor, booking.id, target.value)

    assert len(_returns(db_session, booking.id)) == 1


@pytest.mark.unit
def test_return_rejection_is_terminal(service, make_booking, customer_actor, admin_actor, db_session):
    booking = make_booking("delivered")
    service.initiate_return(customer_actor, booking.id, "stitching came loose")

    booking = service.admin_transition(admin_actor, booking.id, "return_rejected", "Outside return window")

    [return_request] = _returns(db_session, booking.id)
    assert return_request.status == ReturnStatus.RETURN_REJECTED
    assert return_request.admin_notes == "Outside return window"

    with pytest.raises(InvalidTransition):
        service.admin_transition(admin_actor, booking.id, "return_completed")


@pytest.mark.unit
def test_refund_only_on_completion(service, make_booking, customer_actor, admin_actor, db_session):
    booking = make_booking("delivered")
    service.initiate_return(customer_actor, booking.id, "wrong size")

    with pytest.raises(ValidationException):
        service.admin_transition(
            admin_actor, booking.id, "return_approved", refund_amount=Decimal("100.00")
        )

    db_session.expire_all()
    assert db_session.get(Booking, booking.id).status == BookingStatus.RETURN_PENDING


@pytest.mark.unit
def test_missing_return_request_is_consistency_failure(service, make_booking, admin_actor, db_session, metrics):
    booking = make_booking("delivered")
    # Simulate a booking that reached return_pending without its return row
    booking.status = BookingStatus.RETURN_PENDING
    db_session.commit()

    with pytest.raises(ConsistencyFailure) as exc_info:
        service.admin_transition(admin_actor, booking.id, "return_approved")

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["code"] == "consistency_failure"
    assert metrics.get_counter_value("consistency_failures_total", {"operation": "admin_transition"}) == 1

    db_session.expire_all()
    assert db_session.get(Booking, booking.id).status == BookingStatus.RETURN_PENDING


@pytest.mark.unit
def test_mismatched_return_status_is_consistency_failure(service, make_booking, customer_actor, admin_actor, db_session):
    booking = make_booking("delivered")
    _, return_request = service.initiate_return(customer_actor, booking.id, "wrong size")
    return_request.status = ReturnStatus.RETURN_APPROVED
    db_session.commit()

    with pytest.raises(ConsistencyFailure):
        service.admin_transition(admin_actor, booking.id, "return_approved")

    db_session.expire_all()
    assert db_session.get(Booking, booking.id).status == BookingStatus.RETURN_PENDING


@pytest.mark.unit
def test_failed_commit_leaves_nothing_behind(service, make_booking, customer_actor, db_session, monkeypatch, metrics):
    booking = make_booking("delivered")
    booking_id = booking.id

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(ConsistencyFailure):
        service.initiate_return(customer_actor, booking_id, "wrong size")

    monkeypatch.undo()
    assert db_session.get(Booking, booking_id).status == BookingStatus.DELIVERED
    assert _returns(db_session, booking_id) == []
    assert metrics.get_counter_value("consistency_failures_total", {"operation": "initiate_return"}) == 1


@pytest.mark.unit
def test_return_history_survives_booking_deletion(service, make_booking, customer_actor, admin_actor, db_session):
    booking = make_booking("delivered")
    service.initiate_return(customer_actor, booking.id, "wrong size")
    service.admin_transition(admin_actor, booking.id, "return_rejected")

    service.delete_booking(customer_actor, booking.id)

    assert db_session.get(Booking, booking.id) is None
    [return_request] = _returns(db_session, booking.id)
    assert return_request.status == ReturnStatus.RETURN_REJECTED


@pytest.mark.unit
def test_list_return_requests(service, make_booking, customer_actor, admin_actor):
    first = make_booking("delivered")
    second = make_booking("delivered")
    service.initiate_return(customer_actor, first.id, "wrong size")
    service.initiate_return(customer_actor, second.id, "wrong colour")
    service.admin_transition(admin_actor, second.id, "return_approved")

    assert len(service.list_return_requests(admin_actor)) == 2
    approved = service.list_return_requests(admin_actor, status="return_approved")
    assert [r.booking_id for r in approved] == [second.id]


@pytest.mark.unit
def test_list_return_requests_admin_only(service, customer_actor):
    with pytest.raises(ForbiddenException):
        service.list_return_requests(customer_actor)


@pytest.mark.unit
def test_list_return_requests_unknown_status(service, admin_actor):
    with pytest.raises(InvalidStatusValue):
        service.list_return_requests(admin_actor, status="refunded")

"""Booking lifecycle service.

Every status change on a booking goes through this module:

1. Creation: a customer books a catalog product; the booking starts ``pending``
   with a snapshot of the product and the customer's contact details.
2. Admin transitions: moves along the transition graph below. Return
   statuses are mirrored onto the active return request in the same
   transaction.
3. Return initiation: the owning customer opens a return on a delivered
   booking, which creates the return request and moves the booking to
   ``return_pending``.
4. Deletion: admins may delete anything; customers only their own bookings
   once nothing further can happen to them.

Authorization is decided here, from the ``Actor`` passed in, rather than in
the HTTP layer.
"""
from decimal import Decimal
from typing import NoReturn, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from tailorbook.api.middleware.error_handler import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from tailorbook.lib.logging import get_logger, log_with_context
from tailorbook.lib.metrics import MetricsCollector, get_metrics_collector
from tailorbook.models.bookings import Booking, BookingStatus
from tailorbook.models.catalog import ProductType
from tailorbook.models.return_requests import (
    ACTIVE_RETURN_STATUSES,
    ReturnRequest,
    ReturnStatus,
)
from tailorbook.models.users import User
from tailorbook.services.actor import Actor
from tailorbook.services.errors import (
    BookingNotFound,
    ConcurrentModification,
    ConsistencyFailure,
    DuplicateReturnRequest,
    IneligibleForDeletion,
    IneligibleForReturn,
    InvalidStatusValue,
    InvalidTransition,
    ProductNotFound,
    UnknownProductType,
)
from tailorbook.services.product_resolver import CatalogProductResolver, ProductResolver


logger = get_logger(__name__)


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset({BookingStatus.DELIVERED}),
    BookingStatus.DELIVERED: frozenset({BookingStatus.RETURN_PENDING}),
    BookingStatus.RETURN_PENDING: frozenset({BookingStatus.RETURN_APPROVED, BookingStatus.RETURN_REJECTED}),
    BookingStatus.RETURN_APPROVED: frozenset({BookingStatus.RETURN_COMPLETED}),
}

# Only reachable through initiate_return
CUSTOMER_EDGES = frozenset({(BookingStatus.DELIVERED, BookingStatus.RETURN_PENDING)})

# Admin transitions that must be mirrored onto the active return request
RETURN_SYNC_STATUSES: dict[BookingStatus, ReturnStatus] = {
    BookingStatus.RETURN_APPROVED: ReturnStatus.RETURN_APPROVED,
    BookingStatus.RETURN_REJECTED: ReturnStatus.RETURN_REJECTED,
    BookingStatus.RETURN_COMPLETED: ReturnStatus.RETURN_COMPLETED,
}

CUSTOMER_DELETABLE_STATUSES = (
    BookingStatus.DELIVERED,
    BookingStatus.REJECTED,
    BookingStatus.RETURN_REJECTED,
    BookingStatus.RETURN_COMPLETED,
)


def can_transition(from_status: BookingStatus, to_status: BookingStatus) -> bool:
    """True if ``from_status -> to_status`` is an edge of the transition graph."""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def validate_admin_transition(from_status: BookingStatus, to_status: BookingStatus) -> None:
    """Raise InvalidTransition unless an admin may move a booking along this edge."""
    if from_status == to_status:
        raise InvalidTransition(from_status.value, to_status.value, "booking is already in this status")
    if (from_status, to_status) in CUSTOMER_EDGES:
        raise InvalidTransition(from_status.value, to_status.value, "returns are opened by the customer")
    if not can_transition(from_status, to_status):
        raise InvalidTransition(from_status.value, to_status.value)


def parse_booking_status(value: Optional[str]) -> BookingStatus:
    if value is None or not str(value).strip():
        raise ValidationException("Status is required.", errors={"status": "field required"})
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidStatusValue(value, [s.value for s in BookingStatus])


class BookingLifecycleService:
    """Applies booking lifecycle operations within one database session.

    Each public method either commits its changes or raises; business rules
    are checked before anything is written.
    """

    def __init__(
        self,
        session: Session,
        product_resolver: Optional[ProductResolver] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.session = session
        self.product_resolver = product_resolver or CatalogProductResolver(session)
        self.metrics = metrics or get_metrics_collector()

    # ----------------------------------------------------------------- create

    def create_booking(
        self,
        actor: Actor,
        product_type: str,
        product_id,
        notes: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Booking:
        """Book a catalog product for the calling actor.

        Raises:
            UnknownProductType: tag is not a catalog category
            ProductNotFound: no such product in that category
        """
        try:
            resolved_type = ProductType(product_type)
        except ValueError:
            raise UnknownProductType(product_type)

        try:
            resolved_id = product_id if isinstance(product_id, UUID) else UUID(str(product_id))
        except ValueError:
            raise ProductNotFound(resolved_type.value, product_id)

        snapshot = self.product_resolver.resolve(resolved_type, resolved_id)

        user = self.session.get(User, actor.id)
        if user is None:
            raise NotFoundException("User", str(actor.id))

        booking = Booking(
            customer_id=actor.id,
            product_type=resolved_type,
            product_id=resolved_id,
            product_title=snapshot.title,
            product_image=snapshot.image_url,
            contact_name=user.name,
            contact_phone=phone or user.phone,
            contact_email=user.email,
            notes=notes,
            status=BookingStatus.PENDING,
            admin_message="",
        )
        self.session.add(booking)
        self.session.commit()

        self.metrics.increment_bookings_created(resolved_type.value)
        log_with_context(
            logger, "info", "Booking created",
            booking_id=str(booking.id),
            customer_id=str(actor.id),
            product_type=resolved_type.value,
        )
        return booking

    # ------------------------------------------------------------------ reads

    def list_customer_bookings(self, actor: Actor) -> Sequence[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.customer_id == actor.id)
            .order_by(Booking.created_at.desc())
        )
        return self.session.execute(stmt).scalars().all()

    def list_all_bookings(self, actor: Actor) -> Sequence[Booking]:
        self._require_admin(actor)
        stmt = select(Booking).order_by(Booking.created_at.desc())
        return self.session.execute(stmt).scalars().all()

    def list_return_requests(self, actor: Actor, status: Optional[str] = None) -> Sequence[ReturnRequest]:
        self._require_admin(actor)
        stmt = select(ReturnRequest).order_by(ReturnRequest.request_date.desc())
        if status:
            try:
                stmt = stmt.where(ReturnRequest.status == ReturnStatus(status))
            except ValueError:
                raise InvalidStatusValue(status, [s.value for s in ReturnStatus])
        return self.session.execute(stmt).scalars().all()

    def get_booking(self, actor: Actor, booking_id: UUID) -> Booking:
        """Admins see any booking; customers only their own."""
        if actor.is_admin:
            return self._get_booking(booking_id)
        return self._get_owned_booking(actor, booking_id)

    # ------------------------------------------------------------ transitions

    def admin_transition(
        self,
        actor: Actor,
        booking_id: UUID,
        target_status: Optional[str],
        admin_message: Optional[str] = None,
        expected_version: Optional[int] = None,
        refund_amount: Optional[Decimal] = None,
    ) -> Booking:
        """Move a booking along the transition graph on behalf of an admin.

        ``admin_message`` replaces the previous message; ``None`` clears it.
        Return statuses are copied onto the active return request in the same
        commit.

        Raises:
            ForbiddenException: actor is not an admin
            ValidationException: no target status supplied
            InvalidStatusValue: target is not a booking status
            BookingNotFound: no such booking
            ConcurrentModification: version mismatch or lost update race
            InvalidTransition: edge not in the graph, or a self-transition
            ConsistencyFailure: return request missing or could not be written
        """
        self._require_admin(actor)
        target = parse_booking_status(target_status)

        booking = self._get_booking(booking_id)
        self._check_version(booking, expected_version)

        current = booking.status
        validate_admin_transition(current, target)

        if refund_amount is not None and target != BookingStatus.RETURN_COMPLETED:
            raise ValidationException(
                "Refund amount can only be recorded when completing a return.",
                errors={"refund_amount": f"not allowed for status '{target.value}'"},
            )

        message = admin_message or ""
        return_request = None
        if target in RETURN_SYNC_STATUSES:
            return_request = self._active_return(booking.id)
            if return_request is None or return_request.status.value != current.value:
                self._consistency_failure(
                    booking.id,
                    "admin_transition",
                    "no active return request matches the booking status"
                    if return_request is None
                    else f"return request is '{return_request.status.value}'",
                )
            return_request.status = RETURN_SYNC_STATUSES[target]
            return_request.admin_notes = message
            if refund_amount is not None:
                return_request.refund_amount = refund_amount

        booking.status = target
        booking.admin_message = message
        self._commit(booking.id, "admin_transition", dual_write=return_request is not None)

        self.metrics.increment_transitions(current.value, target.value)
        log_with_context(
            logger, "info", f"Booking moved to {target.value}",
            booking_id=str(booking.id),
            from_status=current.value,
            to_status=target.value,
            actor_id=str(actor.id),
        )
        return booking

    def initiate_return(self, actor: Actor, booking_id: UUID, reason: Optional[str]) -> tuple[Booking, ReturnRequest]:
        """Open a return on a delivered booking owned by the caller.

        Raises:
            ValidationException: reason missing or blank
            BookingNotFound: no such booking, or not owned by the caller
            IneligibleForReturn: booking is not ``delivered``
            DuplicateReturnRequest: an active return already exists
            ConsistencyFailure: the two writes could not be committed together
        """
        if reason is None or not reason.strip():
            raise ValidationException("Return reason is required.", errors={"reason": "field required"})
        reason = reason.strip()

        booking = self._get_owned_booking(actor, booking_id)
        if booking.status != BookingStatus.DELIVERED:
            raise IneligibleForReturn(booking.status.value)

        existing = self._active_return(booking.id)
        if existing is not None:
            raise DuplicateReturnRequest(booking.id, existing.status.value)

        return_request = ReturnRequest(
            booking_id=booking.id,
            customer_id=actor.id,
            return_reason=reason,
            status=ReturnStatus.RETURN_PENDING,
        )
        self.session.add(return_request)

        previous = booking.status
        booking.status = BookingStatus.RETURN_PENDING
        booking.admin_message = f"Return requested by customer. Reason: {reason}"
        self._commit(booking.id, "initiate_return", dual_write=True)

        self.metrics.increment_return_requests()
        self.metrics.increment_transitions(previous.value, BookingStatus.RETURN_PENDING.value)
        log_with_context(
            logger, "info", "Return requested",
            booking_id=str(booking.id),
            return_request_id=str(return_request.id),
            actor_id=str(actor.id),
        )
        return booking, return_request

    def delete_booking(self, actor: Actor, booking_id: UUID) -> None:
        """Permanently remove a booking. Return requests are kept as history.

        Raises:
            BookingNotFound: no such booking, or a customer's booking they don't own
            IneligibleForDeletion: customer booking still in progress
        """
        if actor.is_admin:
            booking = self._get_booking(booking_id)
        else:
            booking = self._get_owned_booking(actor, booking_id)
            if booking.status not in CUSTOMER_DELETABLE_STATUSES:
                raise IneligibleForDeletion(
                    "Booking",
                    booking.status.value,
                    [s.value for s in CUSTOMER_DELETABLE_STATUSES],
                )

        status = booking.status
        self.session.delete(booking)
        self._commit(booking.id, "delete_booking")

        log_with_context(
            logger, "info", "Booking deleted",
            booking_id=str(booking_id),
            status=status.value,
            actor_id=str(actor.id),
            actor_role=actor.role.value,
        )

    # ---------------------------------------------------------------- helpers

    def _require_admin(self, actor: Actor) -> None:
        if not actor.is_admin:
            raise ForbiddenException("Admin access required")

    def _get_booking(self, booking_id: UUID) -> Booking:
        booking = self.session.get(Booking, booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def _get_owned_booking(self, actor: Actor, booking_id: UUID) -> Booking:
        # Someone else's booking is reported exactly like a missing one
        stmt = select(Booking).where(Booking.id == booking_id, Booking.customer_id == actor.id)
        booking = self.session.execute(stmt).scalar_one_or_none()
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def _active_return(self, booking_id: UUID) -> Optional[ReturnRequest]:
        stmt = (
            select(ReturnRequest)
            .where(
                ReturnRequest.booking_id == booking_id,
                ReturnRequest.status.in_(ACTIVE_RETURN_STATUSES),
            )
            .order_by(ReturnRequest.request_date.desc())
        )
        return self.session.execute(stmt).scalars().first()

    def _check_version(self, booking: Booking, expected_version: Optional[int]) -> None:
        if expected_version is not None and booking.version != expected_version:
            raise ConcurrentModification(
                booking.id,
                details={"expected_version": expected_version, "current_version": booking.version},
            )

    def _consistency_failure(self, booking_id: UUID, operation: str, reason: str) -> NoReturn:
        self.session.rollback()
        self.metrics.increment_consistency_failures(operation)
        log_with_context(
            logger, "error", "Booking/return request consistency failure",
            booking_id=str(booking_id),
            operation=operation,
            reason=reason,
        )
        raise ConsistencyFailure(booking_id, operation, reason)

    def _commit(self, booking_id: UUID, operation: str, dual_write: bool = False) -> None:
        try:
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            raise ConcurrentModification(booking_id) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            if not dual_write:
                raise
            self.metrics.increment_consistency_failures(operation)
            log_with_context(
                logger, "error", "Booking/return request write rolled back",
                booking_id=str(booking_id),
                operation=operation,
                error=str(exc),
            )
            raise ConsistencyFailure(booking_id, operation, "write was rolled back") from exc

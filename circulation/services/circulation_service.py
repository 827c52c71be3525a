from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from circulation.extensions import db
from circulation.exceptions import (
    AlreadyReturned,
    CirculationError,
    CopyUnavailable,
    NotFound,
    OverdueLockout,
)
from circulation.models.borrow import Borrow
from circulation.models.payment import Payment
from circulation.repositories.book_repo import BookRepo
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.repositories.librarian_repo import LibrarianRepo
from circulation.repositories.member_repo import MemberRepo
from circulation.repositories.payment_repo import PaymentRepo
from circulation.services.billing_service import BillingService
from circulation.services.mail_service import MailService
from circulation.services.unit_of_work import unit_of_work
from circulation.utils.clock import utcnow


@dataclass
class ReturnResult:
    borrow: Borrow
    copy_available: bool
    payment: Payment | None = None
    fulfilled_borrow: Borrow | None = None
    fulfillment_error: str | None = None


class CirculationService:
    @staticmethod
    def _loan_period() -> timedelta:
        return timedelta(days=current_app.config.get("LOAN_PERIOD_DAYS", 14))

    @staticmethod
    def check_out(member_id: int, copy_id: int, employee_id: int, now: datetime,
                  enforce_lockout: bool = True) -> Borrow:
        """
        Writes a new Borrow and flips the copy to unavailable inside the caller's transaction.

        enforce_lockout=False is used by reservation fulfillment, which skips the overdue gate.
        """
        if not MemberRepo.member_exists(member_id):
            raise NotFound(f"Member {member_id} not found")
        if not LibrarianRepo.exists(employee_id):
            raise NotFound(f"Librarian {employee_id} not found")

        copy = BookRepo.get_copy(copy_id, for_update=True)
        if not copy:
            raise NotFound(f"Book copy {copy_id} not found")

        if enforce_lockout and BorrowRepo.has_overdue(member_id, now):
            raise OverdueLockout(
                f"Member {member_id} has overdue books and cannot borrow more until they are returned"
            )

        if not copy.availability:
            raise CopyUnavailable(f"Book copy {copy_id} is not available")

        # a concurrent borrow that got here first leaves nothing to flip
        if not BookRepo.set_availability(copy_id, False):
            raise CopyUnavailable(f"Book copy {copy_id} is not available")

        borrow = Borrow(
            member_id=member_id,
            copy_id=copy_id,
            employee_id=employee_id,
            borrow_date=now,
            expected_return_date=now + CirculationService._loan_period(),
            actual_return_date=None,
            serial_number=copy.serial_number,
        )
        return BorrowRepo.add(borrow)

    @staticmethod
    def borrow_book(member_id: int, copy_id: int, employee_id: int, now: datetime | None = None) -> Borrow:
        now = now or utcnow()

        with unit_of_work():
            borrow = CirculationService.check_out(member_id, copy_id, employee_id, now)

        current_app.logger.info(
            f"[circulation] borrow={borrow.id} member={member_id} copy={copy_id} "
            f"due={borrow.expected_return_date}"
        )
        return borrow

    @staticmethod
    def return_book(borrow_id: int, now: datetime | None = None) -> ReturnResult:
        """
        Closes a borrow and runs the return cascade in one transaction:
        availability -> late fine -> next reservation.

        Reservation fulfillment runs in a savepoint. If it fails the savepoint is
        rolled back, the return still commits and the reservation stays queued for
        ReservationService.retry_pending_fulfillments.
        """
        from circulation.services.reservation_service import ReservationService

        now = now or utcnow()
        payment = None
        fulfilled = None
        fulfillment_error = None

        with unit_of_work():
            borrow = BorrowRepo.get(borrow_id, for_update=True)
            if not borrow:
                raise NotFound(f"Borrow {borrow_id} not found")
            if borrow.actual_return_date is not None:
                raise AlreadyReturned(f"Borrow {borrow_id} is already returned")

            if not BorrowRepo.close(borrow_id, now):
                raise AlreadyReturned(f"Borrow {borrow_id} is already returned")
            db.session.refresh(borrow)

            copy = borrow.copy
            book_id = BookRepo.get_book_id_for_copy(copy.id)
            if not BookRepo.set_availability(copy.id, True):
                current_app.logger.warning(
                    f"[circulation] copy={copy.id} was already available when borrow={borrow_id} closed"
                )

            if now > borrow.expected_return_date and not PaymentRepo.exists_for_borrow(borrow.id):
                payment = BillingService.record_late_fine(
                    borrow,
                    copy.book.price_per_day,
                    current_app.config.get("LATE_FEE_PER_DAY", "5.00"),
                )

            try:
                with db.session.begin_nested():
                    fulfilled = ReservationService.fulfill_next_reservation(book_id, copy.id, now)
            except (CirculationError, SQLAlchemyError) as e:
                fulfilled = None
                fulfillment_error = str(e)
                current_app.logger.warning(
                    f"[circulation] reservation fulfillment failed for book={book_id} "
                    f"after borrow={borrow_id} returned, left queued for retry: {e}"
                )

            db.session.refresh(copy)
            copy_available = copy.availability

        current_app.logger.info(
            f"[circulation] returned borrow={borrow_id} copy={copy.id} "
            f"payment={payment.id if payment else None} "
            f"fulfilled_borrow={fulfilled.id if fulfilled else None}"
        )

        if fulfilled is not None:
            MailService.notify_reservation_ready(fulfilled)

        return ReturnResult(
            borrow=borrow,
            copy_available=copy_available,
            payment=payment,
            fulfilled_borrow=fulfilled,
            fulfillment_error=fulfillment_error,
        )

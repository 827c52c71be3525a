from __future__ import annotations

from datetime import datetime

from flask import current_app

from circulation.exceptions import CirculationError, NotFound
from circulation.models.borrow import Borrow
from circulation.models.reservation import Reservation
from circulation.repositories.book_repo import BookRepo
from circulation.repositories.librarian_repo import LibrarianRepo
from circulation.repositories.member_repo import MemberRepo
from circulation.repositories.reservation_repo import ReservationRepo
from circulation.services.circulation_service import CirculationService
from circulation.services.mail_service import MailService
from circulation.services.unit_of_work import unit_of_work
from circulation.utils.clock import utcnow


class ReservationService:
    @staticmethod
    def enqueue(book_id: int, member_id: int, now: datetime | None = None) -> Reservation:
        # the same member may hold several reservations for one book
        now = now or utcnow()

        with unit_of_work():
            if not BookRepo.get(book_id):
                raise NotFound(f"Book {book_id} not found")
            if not MemberRepo.member_exists(member_id):
                raise NotFound(f"Member {member_id} not found")

            reservation = ReservationRepo.add(
                Reservation(book_id=book_id, member_id=member_id, reservation_date=now)
            )

        current_app.logger.info(
            f"[reservations] reservation={reservation.id} book={book_id} member={member_id}"
        )
        return reservation

    @staticmethod
    def peek(book_id: int) -> list[Reservation]:
        return ReservationRepo.queue_for_book(book_id)

    @staticmethod
    def fulfill_next_reservation(book_id: int, copy_id: int, now: datetime,
                                 employee_id: int | None = None) -> Borrow | None:
        """
        Turns the earliest reservation for `book_id` into a borrow of `copy_id`.

        Runs inside the caller's transaction. The overdue lockout is not checked for
        the waiting member. Returns None when nobody is waiting or no librarian exists
        to attribute the borrow to.
        """
        head = ReservationRepo.head_for_book(book_id)
        if head is None:
            return None

        if employee_id is None:
            employee_id = LibrarianRepo.any_valid_employee_id()
        if employee_id is None:
            current_app.logger.warning(
                f"[reservations] no librarian on record, reservation={head.id} left queued"
            )
            return None

        borrow = CirculationService.check_out(
            head.member_id, copy_id, employee_id, now, enforce_lockout=False
        )
        ReservationRepo.delete(head)

        current_app.logger.info(
            f"[reservations] fulfilled reservation={head.id} book={book_id} "
            f"member={borrow.member_id} borrow={borrow.id}"
        )
        return borrow

    @staticmethod
    def retry_pending_fulfillments(now: datetime | None = None) -> list[Borrow]:
        """
        Serves waiting members of every book that has an available copy.
        Each fulfillment commits on its own; a failing book is logged and skipped.
        """
        now = now or utcnow()
        fulfilled = []

        waiting = ReservationRepo.book_ids_with_waiters()
        for book_id in BookRepo.books_with_available_copies(waiting):
            while True:
                try:
                    with unit_of_work():
                        copy = BookRepo.first_available_copy(book_id)
                        borrow = None
                        if copy is not None:
                            borrow = ReservationService.fulfill_next_reservation(book_id, copy.id, now)
                except CirculationError as e:
                    current_app.logger.warning(f"[reservations] retry for book={book_id} failed: {e}")
                    break

                if borrow is None:
                    break
                fulfilled.append(borrow)
                MailService.notify_reservation_ready(borrow)

        if fulfilled:
            current_app.logger.info(f"[reservations] retry sweep fulfilled {len(fulfilled)} reservation(s)")
        return fulfilled

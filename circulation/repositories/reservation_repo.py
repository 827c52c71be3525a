from circulation.models.reservation import Reservation
from circulation.extensions import db


class ReservationRepo:
    @staticmethod
    def add(reservation: Reservation):
        db.session.add(reservation)
        db.session.flush()
        return reservation

    @staticmethod
    def queue_for_book(book_id: int):
        return (
            Reservation.query
            .filter_by(book_id=book_id)
            .order_by(Reservation.reservation_date.asc(), Reservation.id.asc())
            .all()
        )

    @staticmethod
    def head_for_book(book_id: int):
        return (
            Reservation.query
            .filter_by(book_id=book_id)
            .order_by(Reservation.reservation_date.asc(), Reservation.id.asc())
            .first()
        )

    @staticmethod
    def book_ids_with_waiters():
        return [r.book_id for r in db.session.query(Reservation.book_id).distinct().all()]

    @staticmethod
    def delete(reservation: Reservation):
        db.session.delete(reservation)
        db.session.flush()

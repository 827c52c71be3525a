from datetime import datetime

from sqlalchemy import update

from circulation.models.borrow import Borrow
from circulation.extensions import db


class BorrowRepo:
    @staticmethod
    def get(borrow_id: int, for_update: bool = False):
        query = db.session.query(Borrow).filter(Borrow.id == borrow_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def list_by_member(member_id: int):
        return Borrow.query.filter_by(member_id=member_id).order_by(Borrow.borrow_date.desc(), Borrow.id.desc()).all()

    @staticmethod
    def add(borrow: Borrow):
        db.session.add(borrow)
        db.session.flush()
        return borrow

    @staticmethod
    def close(borrow_id: int, returned_at: datetime) -> bool:
        """Sets actual_return_date only if it is still NULL. False means it was already closed."""
        result = db.session.execute(
            update(Borrow)
            .where(Borrow.id == borrow_id, Borrow.actual_return_date.is_(None))
            .values(actual_return_date=returned_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def has_overdue(member_id: int, now: datetime) -> bool:
        return db.session.query(Borrow.id).filter(
            Borrow.member_id == member_id,
            Borrow.actual_return_date.is_(None),
            Borrow.expected_return_date < now
        ).first() is not None

    @staticmethod
    def find_overdue(now: datetime):
        return Borrow.query.filter(
            Borrow.actual_return_date.is_(None),
            Borrow.expected_return_date < now
        ).order_by(Borrow.expected_return_date).all()

    @staticmethod
    def find_due_between(start: datetime, end: datetime):
        return Borrow.query.filter(
            Borrow.actual_return_date.is_(None),
            Borrow.expected_return_date >= start,
            Borrow.expected_return_date <= end
        ).order_by(Borrow.expected_return_date).all()

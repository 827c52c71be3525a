from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from circulation.extensions import db
from circulation.exceptions import NotFound
from circulation.models.book import Book, BookCopy
from circulation.models.borrow import Borrow
from circulation.models.member import Member
from circulation.models.payment import Payment, PaymentStatus
from circulation.repositories.borrow_repo import BorrowRepo
from circulation.repositories.member_repo import MemberRepo
from circulation.utils.clock import calendar_days, utcnow


class ReportService:
    """Read-only projections over borrows, payments and reservations."""

    @staticmethod
    def overdue(now: datetime | None = None) -> list[dict]:
        now = now or utcnow()
        fee = Decimal(str(current_app.config.get("LATE_FEE_PER_DAY", "5.00")))

        rows = []
        for b in BorrowRepo.find_overdue(now):
            days_overdue = calendar_days(b.expected_return_date, now)
            rows.append({
                "borrow_id": b.id,
                "title": b.copy.book.title,
                "serial_number": b.serial_number,
                "member_id": b.member_id,
                "member_name": b.member.fullname,
                "email": b.member.email,
                "expected_return_date": b.expected_return_date.isoformat(),
                "days_overdue": days_overdue,
                "potential_fine": str((fee * days_overdue).quantize(Decimal("0.01"))),
                "payment_recorded": b.payment is not None,
            })
        return rows

    @staticmethod
    def due_soon(now: datetime | None = None, days: int | None = None) -> list[dict]:
        now = now or utcnow()
        if days is None:
            days = current_app.config.get("DUE_SOON_DAYS", 7)

        return [
            {
                "borrow_id": b.id,
                "title": b.copy.book.title,
                "member_name": b.member.fullname,
                "email": b.member.email,
                "borrow_date": b.borrow_date.isoformat(),
                "expected_return_date": b.expected_return_date.isoformat(),
                "days_remaining": calendar_days(now, b.expected_return_date),
            }
            for b in BorrowRepo.find_due_between(now, now + timedelta(days=days))
        ]

    @staticmethod
    def member_history(member_id: int) -> list[dict]:
        if not MemberRepo.member_exists(member_id):
            raise NotFound(f"Member {member_id} not found")

        return [
            {
                "borrow_id": b.id,
                "title": b.copy.book.title,
                "serial_number": b.serial_number,
                "borrow_date": b.borrow_date.isoformat(),
                "expected_return_date": b.expected_return_date.isoformat(),
                "actual_return_date": b.actual_return_date.isoformat() if b.actual_return_date else None,
            }
            for b in BorrowRepo.list_by_member(member_id)
        ]

    @staticmethod
    def member_summary(member_id: int) -> dict:
        member = MemberRepo.get(member_id)
        if not member:
            raise NotFound(f"Member {member_id} not found")

        total_borrows = db.session.query(func.count(Borrow.id)).filter(Borrow.member_id == member_id).scalar()
        current_borrows = db.session.query(func.count(Borrow.id)).filter(
            Borrow.member_id == member_id,
            Borrow.actual_return_date.is_(None)
        ).scalar()

        unpaid = (
            db.session.query(func.count(Payment.id), func.sum(Payment.total_amount))
            .join(Borrow, Payment.borrowing_id == Borrow.id)
            .filter(Borrow.member_id == member_id, Payment.status == PaymentStatus.UNPAID)
            .one()
        )

        return {
            "member_id": member.id,
            "fullname": member.fullname,
            "email": member.email,
            "total_borrows": total_borrows,
            "current_borrows": current_borrows,
            "unpaid_payments": unpaid[0],
            "outstanding_balance": str(Decimal(str(unpaid[1] or 0)).quantize(Decimal("0.01"))),
        }

    @staticmethod
    def unpaid_payments() -> list[dict]:
        rows = (
            db.session.query(Payment, Borrow, Member)
            .join(Borrow, Payment.borrowing_id == Borrow.id)
            .join(Member, Borrow.member_id == Member.id)
            .filter(Payment.status == PaymentStatus.UNPAID)
            .order_by(Member.id, Payment.id)
            .all()
        )
        return [
            {
                "payment_id": p.id,
                "borrow_id": b.id,
                "member_id": m.id,
                "fullname": m.fullname,
                "email": m.email,
                "street": m.address.street if m.address else None,
                "city": m.address.city if m.address else None,
                "postal_code": m.address.postal_code if m.address else None,
                "total_amount": str(p.total_amount),
            }
            for p, b, m in rows
        ]

    @staticmethod
    def late_returns() -> list[dict]:
        rows = (
            db.session.query(Borrow, Book.title)
            .join(BookCopy, Borrow.copy_id == BookCopy.id)
            .join(Book, BookCopy.book_id == Book.id)
            .filter(
                Borrow.actual_return_date.isnot(None),
                Borrow.actual_return_date > Borrow.expected_return_date
            )
            .order_by(Borrow.actual_return_date.desc())
            .all()
        )
        return [
            {
                "borrow_id": b.id,
                "title": title,
                "expected_return_date": b.expected_return_date.isoformat(),
                "actual_return_date": b.actual_return_date.isoformat(),
                "days_late": calendar_days(b.expected_return_date, b.actual_return_date),
            }
            for b, title in rows
        ]

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from circulation.extensions import db
from circulation.exceptions import DuplicatePayment, NotFound
from circulation.models.borrow import Borrow
from circulation.models.payment import Payment, PaymentStatus
from circulation.services.billing_service import BillingService
from circulation.services.circulation_service import CirculationService

NOW = datetime(2025, 4, 1, 10, 0)


def _late_payment():
    b = CirculationService.borrow_book(1001, 3, 2005, now=NOW)
    result = CirculationService.return_book(b.id, now=NOW + timedelta(days=16))
    return b, result.payment


def test_compute_late_fine_counts_calendar_days(app):
    borrow = Borrow(
        borrow_date=datetime(2025, 4, 1, 23, 30),
        expected_return_date=datetime(2025, 4, 8, 23, 30),
        actual_return_date=datetime(2025, 4, 10, 0, 15),
    )
    amount, fine, total = BillingService.compute_late_fine(borrow, Decimal("2.00"))
    assert (amount, fine, total) == (Decimal("18.00"), Decimal("10.00"), Decimal("28.00"))


def test_compute_late_fine_custom_fee(app):
    borrow = Borrow(
        borrow_date=datetime(2025, 1, 1),
        expected_return_date=datetime(2025, 1, 15),
        actual_return_date=datetime(2025, 1, 18),
    )
    amount, fine, total = BillingService.compute_late_fine(borrow, "1.25", late_fee_per_day="0.50")
    assert amount == Decimal("21.25")
    assert fine == Decimal("1.50")
    assert total == Decimal("22.75")


def test_late_return_uses_book_daily_rate(library):
    _borrow, payment = _late_payment()
    # book 105 costs 1.50/day: 16 days held, 2 days late
    assert payment.amount == Decimal("24.00")
    assert payment.fine_amount == Decimal("10.00")
    assert payment.total_amount == Decimal("34.00")


def test_record_late_fine_refuses_second_payment(library):
    borrow, _payment = _late_payment()

    with pytest.raises(DuplicatePayment):
        BillingService.record_late_fine(db.session.get(Borrow, borrow.id), Decimal("1.50"))
    db.session.rollback()

    assert Payment.query.filter_by(borrowing_id=borrow.id).count() == 1


def test_mark_paid(library):
    _borrow, payment = _late_payment()

    paid = BillingService.mark_paid(payment.id)
    assert paid.status == PaymentStatus.PAID

    # terminal: paying again changes nothing
    again = BillingService.mark_paid(payment.id)
    assert again.status == PaymentStatus.PAID
    assert again.total_amount == Decimal("34.00")


def test_mark_paid_unknown_payment(library):
    with pytest.raises(NotFound):
        BillingService.mark_paid(31337)


def test_return_hours_late_on_due_date_bills_without_fine(library):
    b = CirculationService.borrow_book(1001, 1, 2005, now=NOW)
    # due NOW + 14 days; returned the same calendar day, five hours after
    result = CirculationService.return_book(b.id, now=NOW + timedelta(days=14, hours=5))

    payment = result.payment
    assert payment is not None
    assert payment.amount == Decimal("28.00")
    assert payment.fine_amount == Decimal("0.00")
    assert payment.total_amount == Decimal("28.00")
    assert payment.status == PaymentStatus.UNPAID

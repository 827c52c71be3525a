from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from circulation.extensions import db
from circulation.exceptions import DuplicatePayment, NotFound
from circulation.models.borrow import Borrow
from circulation.models.payment import Payment, PaymentStatus
from circulation.repositories.payment_repo import PaymentRepo
from circulation.services.unit_of_work import unit_of_work
from circulation.utils.clock import calendar_days

CENTS = Decimal("0.01")
LATE_RETURN_NOTE = "Late return"


class BillingService:
    @staticmethod
    def compute_late_fine(borrow: Borrow, daily_rate, late_fee_per_day=Decimal("5.00")):
        """
        Returns (amount, fine_amount, total_amount) for a returned borrow.

        amount      = days held (borrow_date -> actual_return_date) x daily_rate
        fine_amount = days late (expected_return_date -> actual_return_date) x late_fee_per_day
        """
        days_held = calendar_days(borrow.borrow_date, borrow.actual_return_date)
        days_late = calendar_days(borrow.expected_return_date, borrow.actual_return_date)

        amount = (Decimal(days_held) * Decimal(str(daily_rate))).quantize(CENTS)
        fine_amount = (Decimal(days_late) * Decimal(str(late_fee_per_day))).quantize(CENTS)
        return amount, fine_amount, (amount + fine_amount).quantize(CENTS)

    @staticmethod
    def record_late_fine(borrow: Borrow, daily_rate, late_fee_per_day=Decimal("5.00")) -> Payment:
        """
        Adds an Unpaid payment for a late return to the current transaction.
        Caller owns the commit.
        """
        if PaymentRepo.exists_for_borrow(borrow.id):
            raise DuplicatePayment(f"Borrow {borrow.id} already has a payment")

        amount, fine_amount, total_amount = BillingService.compute_late_fine(
            borrow, daily_rate, late_fee_per_day
        )
        payment = Payment(
            borrowing_id=borrow.id,
            employee_id=borrow.employee_id,
            amount=amount,
            fine_amount=fine_amount,
            total_amount=total_amount,
            note=LATE_RETURN_NOTE,
            status=PaymentStatus.UNPAID,
        )

        # unique(borrowing_id) also rejects a concurrent insert
        try:
            with db.session.begin_nested():
                PaymentRepo.add(payment)
        except IntegrityError as e:
            raise DuplicatePayment(f"Borrow {borrow.id} already has a payment") from e

        current_app.logger.info(
            f"[billing] payment={payment.id} borrow={borrow.id} amount={amount} "
            f"fine={fine_amount} total={total_amount}"
        )
        return payment

    @staticmethod
    def mark_paid(payment_id: int) -> Payment:
        with unit_of_work():
            payment = PaymentRepo.get(payment_id)
            if not payment:
                raise NotFound(f"Payment {payment_id} not found")

            if payment.status == PaymentStatus.PAID:
                return payment

            payment.status = PaymentStatus.PAID

        current_app.logger.info(f"[billing] payment={payment_id} marked paid")
        return payment

from circulation.models.payment import Payment
from circulation.extensions import db


class PaymentRepo:
    @staticmethod
    def get(payment_id: int):
        return db.session.get(Payment, payment_id)

    @staticmethod
    def exists_for_borrow(borrow_id: int) -> bool:
        return db.session.query(Payment.id).filter(Payment.borrowing_id == borrow_id).first() is not None

    @staticmethod
    def add(payment: Payment):
        db.session.add(payment)
        db.session.flush()
        return payment

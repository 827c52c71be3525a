import enum

from circulation.extensions import db


class PaymentStatus(enum.Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)

    # at most one payment per borrow
    borrowing_id = db.Column(db.Integer, db.ForeignKey("borrows.id"), unique=True, nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("librarians.id"), nullable=False)

    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    fine_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    note = db.Column(db.String(255), nullable=True)
    status = db.Column(db.Enum(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID)

    borrow = db.relationship("Borrow", backref=db.backref("payment", uselist=False))

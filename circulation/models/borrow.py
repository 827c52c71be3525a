from sqlalchemy.orm import validates

from circulation.extensions import db
from circulation.exceptions import AlreadyReturned


class Borrow(db.Model):
    __tablename__ = "borrows"

    id = db.Column(db.Integer, primary_key=True)

    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    copy_id = db.Column(db.Integer, db.ForeignKey("book_copies.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("librarians.id"), nullable=False, index=True)

    borrow_date = db.Column(db.DateTime, nullable=False)
    expected_return_date = db.Column(db.DateTime, nullable=False, index=True)
    actual_return_date = db.Column(db.DateTime, nullable=True)

    # serial of the copy at borrow time
    serial_number = db.Column(db.String(64), nullable=True)

    member = db.relationship("Member", backref="borrows")
    copy = db.relationship("BookCopy", backref="borrows")
    employee = db.relationship("Librarian", backref="borrows")

    @validates("actual_return_date")
    def _validate_actual_return_date(self, key, value):
        if self.actual_return_date is not None and value != self.actual_return_date:
            raise AlreadyReturned(f"Borrow {self.id} is already returned")
        return value

    @property
    def is_open(self) -> bool:
        return self.actual_return_date is None

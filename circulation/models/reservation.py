from circulation.extensions import db


class Reservation(db.Model):
    __tablename__ = "reservations"

    id = db.Column(db.Integer, primary_key=True)

    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    reservation_date = db.Column(db.DateTime, nullable=False)

    book = db.relationship("Book", backref="reservations")
    member = db.relationship("Member", backref="reservations")

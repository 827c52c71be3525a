from datetime import date

from circulation.extensions import db


class Address(db.Model):
    __tablename__ = "addresses"

    id = db.Column(db.Integer, primary_key=True)
    street = db.Column(db.String(200), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    fullname = db.Column(db.String(200), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    date_of_registration = db.Column(db.Date, nullable=False, default=date.today)
    address_id = db.Column(db.Integer, db.ForeignKey("addresses.id"), nullable=True)

    address = db.relationship("Address", backref="members")

from circulation.extensions import db


class Librarian(db.Model):
    __tablename__ = "librarians"

    id = db.Column(db.Integer, primary_key=True)
    fullname = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)

    role = db.Column(db.String(50), nullable=False, default="Librarian")
    phone_number = db.Column(db.String(32), nullable=True)
    work_schedule = db.Column(db.String(100), nullable=True)

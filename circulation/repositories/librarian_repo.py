from sqlalchemy import func

from circulation.models.librarian import Librarian
from circulation.extensions import db


class LibrarianRepo:
    @staticmethod
    def get_by_id(librarian_id: int):
        return db.session.get(Librarian, librarian_id)

    @staticmethod
    def get_by_email(email: str):
        return Librarian.query.filter_by(email=email).first()

    @staticmethod
    def exists(librarian_id: int) -> bool:
        return db.session.query(Librarian.id).filter(Librarian.id == librarian_id).first() is not None

    @staticmethod
    def any_valid_employee_id():
        """Deterministic "pick one" policy: the lowest librarian id, or None if there are no librarians."""
        return db.session.query(func.min(Librarian.id)).scalar()

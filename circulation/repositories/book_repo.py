from sqlalchemy import update

from circulation.models.book import Book, BookCopy
from circulation.extensions import db


class BookRepo:
    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_copy(copy_id: int, for_update: bool = False):
        query = db.session.query(BookCopy).filter(BookCopy.id == copy_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def get_book_id_for_copy(copy_id: int):
        return db.session.query(BookCopy.book_id).filter(BookCopy.id == copy_id).scalar()

    @staticmethod
    def set_availability(copy_id: int, available: bool) -> bool:
        """
        Conditional flip: only touches the row if it currently holds the opposite value.
        Returns True when this call changed the row, False when someone else already did.
        Loaded BookCopy objects are not synchronized; re-read with get_copy(for_update=True).
        """
        result = db.session.execute(
            update(BookCopy)
            .where(BookCopy.id == copy_id, BookCopy.availability == (not available))
            .values(availability=available)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def books_with_available_copies(book_ids):
        if not book_ids:
            return []
        rows = (
            db.session.query(BookCopy.book_id)
            .filter(BookCopy.book_id.in_(book_ids), BookCopy.availability.is_(True))
            .distinct()
            .all()
        )
        return [r.book_id for r in rows]

    @staticmethod
    def first_available_copy(book_id: int):
        return (
            BookCopy.query
            .filter(BookCopy.book_id == book_id, BookCopy.availability.is_(True))
            .order_by(BookCopy.id)
            .first()
        )

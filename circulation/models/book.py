from circulation.extensions import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    # base borrowing fee, charged per day held on late returns
    price_per_day = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    category = db.relationship("Category", backref="books")


class BookCopy(db.Model):
    __tablename__ = "book_copies"

    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    serial_number = db.Column(db.String(64), nullable=False, unique=True)

    # false iff an open borrow exists on this copy
    availability = db.Column(db.Boolean, nullable=False, default=True)

    book = db.relationship("Book", backref="copies")

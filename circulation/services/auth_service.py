from werkzeug.security import check_password_hash
from flask_jwt_extended import create_access_token

from circulation.repositories.librarian_repo import LibrarianRepo


class AuthService:
    @staticmethod
    def login(email: str, password: str):
        librarian = LibrarianRepo.get_by_email(email)
        if not librarian or not librarian.password_hash or not check_password_hash(librarian.password_hash, password):
            raise ValueError("Wrong email or password")

        token = create_access_token(
            identity=str(librarian.id),
            additional_claims={"role": librarian.role, "fullname": librarian.fullname}
        )
        return token, librarian

from circulation.models.member import Member
from circulation.extensions import db


class MemberRepo:
    @staticmethod
    def get(member_id: int):
        return db.session.get(Member, member_id)

    @staticmethod
    def member_exists(member_id: int) -> bool:
        return db.session.query(Member.id).filter(Member.id == member_id).first() is not None

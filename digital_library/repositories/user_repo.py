from sqlalchemy import or_

from digital_library.extensions import db
from digital_library.models.user import User


class UserRepo:
    @staticmethod
    def get_by_username(username: str):
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_login(login: str):
        # login accepts either the username or the email
        return User.query.filter(or_(User.username == login, User.email == login)).first()

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.flush()
        return user

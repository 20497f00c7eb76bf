from flask import current_app
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from digital_library.errors import Conflict, InvalidInput, Unauthorized
from digital_library.models.user import User
from digital_library.repositories.user_repo import UserRepo
from digital_library.utils.transaction import atomic


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str, role: str = "user"):
        if not username or not email or not password:
            raise InvalidInput("Username, password, and email are required")

        if UserRepo.get_by_username(username):
            raise Conflict("Username already exists")
        if UserRepo.get_by_email(email):
            raise Conflict("Email already exists")

        # unique constraints still catch a concurrent duplicate
        with atomic(failure_message="Could not create user", conflict_message="Username or email already exists"):
            user = UserRepo.create(User(
                username=username,
                email=email,
                password_hash=generate_password_hash(password),
                role=role
            ))

        current_app.logger.info(f"[auth] registered user '{username}' (id={user.id})")
        return user

    @staticmethod
    def login(login: str, password: str):
        if not login or not password:
            raise InvalidInput("Username and password are required")

        user = UserRepo.get_by_login(login)
        if not user or not check_password_hash(user.password_hash, password):
            raise Unauthorized("Invalid credentials")

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username}
        )
        return token, user

# store_service/users.py

"""
Accounts: signup, lookup, password change and the OTP-based reset flow.
Reset codes reach the user through the auth-email queue.
"""
import logging
import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from sqlalchemy.orm import Session

from . import config
from .db import transaction
from .exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from .messaging import RedisQueue
from .models import ForgotPassword, User
from .repositories import UserRepository
from .schemas import (
    AuthEmailMessage,
    ChangePasswordRequest,
    ResetPasswordRequest,
    SignupRequest,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

USERNAME_EXISTS = "Tên đăng nhập đã tồn tại"
EMAIL_EXISTS = "Email đã được sử dụng"
USER_NOT_FOUND = "Không tìm thấy người dùng"
PASSWORD_TOO_SHORT = "Mật khẩu phải có ít nhất 6 ký tự"
WRONG_OLD_PASSWORD = "Mật khẩu cũ không chính xác"
WRONG_OTP = "Mã OTP không chính xác"
OTP_EXPIRED = "Mã OTP đã hết hiệu lực"
RESET_SUBJECT = "Mã xác thực đặt lại mật khẩu"

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_otp(length: int = config.OTP_LENGTH) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def _check_password_length(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise BadRequestError(PASSWORD_TOO_SHORT)


class UserService:
    def __init__(self, db: Session, queue: Optional[RedisQueue] = None):
        self.db = db
        self.users = UserRepository(db)
        self.queue = queue

    def signup(self, request: SignupRequest) -> User:
        _check_password_length(request.password)
        with transaction(self.db):
            if self.users.exists_by_username(request.username):
                raise AlreadyExistsError(USERNAME_EXISTS)
            if self.users.exists_by_email(request.email):
                raise AlreadyExistsError(EMAIL_EXISTS)
            user = self.users.save(
                User(
                    username=request.username,
                    email=request.email,
                    password_hash=hash_password(request.password),
                )
            )
        logger.info(f"User '{user.username}' signed up.")
        return user

    def get_user_by_username(self, username: str) -> User:
        user = self.users.find_by_username(username)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def change_password(self, username: str, request: ChangePasswordRequest) -> None:
        _check_password_length(request.old_password)
        _check_password_length(request.new_password)
        with transaction(self.db):
            user = self.get_user_by_username(username)
            if not verify_password(user.password_hash, request.old_password):
                raise BadRequestError(WRONG_OLD_PASSWORD)
            user.password_hash = hash_password(request.new_password)
        logger.info(f"Password changed for '{username}'.")

    def forgot_password(self, email: str) -> None:
        """Store a fresh reset code for `email` and queue the email carrying it."""
        otp = generate_otp()
        with transaction(self.db):
            if not self.users.exists_by_email(email):
                raise NotFoundError(USER_NOT_FOUND)
            self.users.save_forgot_password(ForgotPassword(email=email, otp=otp, attempts=0))
        self.queue.publish(
            config.AUTH_EMAIL_QUEUE,
            AuthEmailMessage(to=email, subject=RESET_SUBJECT, otp=otp),
        )
        logger.info(f"Password reset code queued for {email}.")

    def reset_password(self, request: ResetPasswordRequest) -> None:
        _check_password_length(request.new_password)
        # Failed attempts must be committed even though the request fails.
        with transaction(self.db):
            record = self.users.find_forgot_password(request.email)
            if record is None or record.attempts >= config.OTP_MAX_ATTEMPTS:
                raise BadRequestError(OTP_EXPIRED)
            if not secrets.compare_digest(record.otp.encode(), request.otp.encode()):
                record.attempts += 1
                attempts = record.attempts
            else:
                attempts = None
                user = self.users.find_by_email(request.email)
                if user is None:
                    raise NotFoundError(USER_NOT_FOUND)
                user.password_hash = hash_password(request.new_password)
                self.users.delete_forgot_password(record)

        if attempts is not None:
            logger.warning(f"Wrong reset code for {request.email} (attempt {attempts}).")
            if attempts >= config.OTP_MAX_ATTEMPTS:
                raise BadRequestError(OTP_EXPIRED)
            raise BadRequestError(WRONG_OTP)
        logger.info(f"Password reset for {request.email}.")

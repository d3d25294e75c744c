import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from datetime import datetime
from typing import List, Optional, Tuple

import bcrypt

from luxestay.common.models.bookings import Booking
from luxestay.common.models.users import User, UserRole
from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.token_repo import TokenRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.utils.constants import TOKEN_EXPIRY_LABEL
from luxestay.common.utils.custom_exceptions import (
    IncorrectCredentials,
    TokenRevoked,
    UserNotFound,
)
from luxestay.common.utils.jwt_service import TokenClaims, TokenCodec

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_password_hash() -> bytes:
    # stands in for the stored hash when the email is unknown
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt())


@dataclass
class AuthResult:
    user_id: str
    token: str
    role: UserRole
    expires_at: datetime
    expiration_time: str = TOKEN_EXPIRY_LABEL

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "token": self.token,
            "role": self.role.value,
            "expiration_time": self.expiration_time,
            "expires_at": self.expires_at.isoformat(),
        }


class UserService:
    def __init__(
        self,
        user_repo: UserRepository,
        token_codec: Optional[TokenCodec] = None,
        token_repo: Optional[TokenRepository] = None,
        booking_repo: Optional[BookingRepository] = None,
    ):
        self.user_repo = user_repo
        self._token_codec = token_codec
        self.token_repo = token_repo
        self.booking_repo = booking_repo

    @property
    def token_codec(self) -> TokenCodec:
        if self._token_codec is None:
            self._token_codec = TokenCodec()
        return self._token_codec

    def get_user_by_id(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id=user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def get_user_by_mail(self, mail: str) -> User:
        user = self.user_repo.get_by_mail(mail=mail)
        if user is None:
            raise UserNotFound(mail)
        return user

    def _issue(self, user: User) -> AuthResult:
        issued = self.token_codec.issue(user.user_id, user.email, user.role.value)
        return AuthResult(
            user_id=user.user_id,
            token=issued.token,
            role=user.role,
            expires_at=issued.claims.expires_at,
        )

    def login(self, email: str, password: str) -> AuthResult:
        user = self.user_repo.get_by_mail(mail=email)
        stored_hash = user.password.encode("utf-8") if user else _dummy_password_hash()
        password_ok = bcrypt.checkpw(password.encode("utf-8"), stored_hash)
        if user is None or not password_ok:
            raise IncorrectCredentials("Invalid email or password")

        logger.info("User %s logged in", user.user_id)
        return self._issue(user)

    def signup(
        self,
        email: str,
        name: str,
        password: str,
        phone: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> AuthResult:
        user = User(
            user_id=str(uuid.uuid4()),
            name=name,
            email=UserRepository.normalise_email(email),
            phone_number=phone,
            password=self._hash_password(password),
            role=role or UserRole.USER,
        )
        # the email index item is conditional, so a taken email raises UserAlreadyExists
        self.user_repo.add_user(user)
        logger.info("Registered user %s with role %s", user.user_id, user.role.value)
        return self._issue(user)

    def verify_token(self, token: str) -> TokenClaims:
        claims = self.token_codec.verify(token)
        if self.token_repo is not None and self.token_repo.is_revoked(claims.token_id):
            raise TokenRevoked("token has been revoked")
        return claims

    def logout(self, token: str):
        claims = self.token_codec.verify(token)
        if self.token_repo is None:
            return
        self.token_repo.revoke(claims.token_id, claims.expires_at)
        logger.info("Revoked token %s for user %s", claims.token_id, claims.user_id)

    def list_users(self) -> List[User]:
        return sorted(self.user_repo.list_users(), key=lambda u: u.email)

    def delete_user(self, user_id: str):
        user = self.get_user_by_id(user_id)
        self.user_repo.delete_user(user)
        logger.info("Deleted user %s", user_id)

    def get_profile(self, user_id: str) -> Tuple[User, List[Booking]]:
        user = self.get_user_by_id(user_id)
        bookings = self.booking_repo.get_user_bookings(user_id) if self.booking_repo else []
        return user, sorted(bookings, key=lambda b: b.check_in)

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

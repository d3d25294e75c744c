import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from luxestay.common.utils.constants import TOKEN_LIFETIME_DAYS
from luxestay.common.utils.custom_exceptions import (
    TokenBadSignature,
    TokenExpired,
    TokenMalformed,
)
from luxestay.common.utils.datetime_normaliser import utc_now

SECRET_KEY = os.environ.get("JWT_SECRET")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
TOKEN_LIFETIME = timedelta(days=TOKEN_LIFETIME_DAYS)


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: str
    token_id: str
    expires_at: datetime


@dataclass(frozen=True)
class IssuedToken:
    token: str
    claims: TokenClaims


class TokenCodec:
    """Signs and verifies the stateless identity token.

    A token is valid strictly before its ``exp`` claim: verifying at the
    expiry instant itself fails with ``TokenExpired``. The clock is injectable
    so the boundary can be exercised without waiting.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = ALGORITHM,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.secret_key = secret_key or SECRET_KEY
        if not self.secret_key:
            raise RuntimeError("JWT_SECRET environment variable is not set")
        self.algorithm = algorithm
        self.clock = clock or utc_now

    def issue(self, user_id: str, email: str, role: str) -> IssuedToken:
        issued_at = self.clock().astimezone(timezone.utc).replace(microsecond=0)
        expires_at = issued_at + TOKEN_LIFETIME
        token_id = uuid.uuid4().hex

        payload = {
            "sub": user_id,
            "email": email,
            "role": role,
            "jti": token_id,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(
            token=token,
            claims=TokenClaims(
                user_id=user_id,
                email=email,
                role=role,
                token_id=token_id,
                expires_at=expires_at,
            ),
        )

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidSignatureError as err:
            raise TokenBadSignature("token signature is invalid") from err
        except jwt.InvalidTokenError as err:
            raise TokenMalformed(f"token is malformed: {err}") from err

        try:
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError) as err:
            raise TokenMalformed("token expiry is not a timestamp") from err

        # expiry is inclusive
        if self.clock() >= expires_at:
            raise TokenExpired("token has expired")

        return TokenClaims(
            user_id=str(payload["sub"]),
            email=payload.get("email", ""),
            role=payload.get("role", "USER"),
            token_id=payload.get("jti", ""),
            expires_at=expires_at,
        )


def strip_bearer(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    if header_value.startswith("Bearer "):
        return header_value[len("Bearer "):].strip() or None
    return header_value.strip() or None

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass
class User:
    user_id: str
    name: str
    email: str
    password: str
    role: UserRole = UserRole.USER
    phone_number: Optional[str] = None

    def to_public_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "phone_number": self.phone_number,
            "role": self.role.value,
        }

"""
Auth payload schemas and the role model.
"""

from __future__ import annotations

import enum
import logging
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from nftfolio.core.schemas import WireModel

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    ADMIN = "admin"
    CREATOR = "creator"
    GUEST = "guest"


# Role spellings seen in stored user rows, folded into the closed enum.
_ROLE_ALIASES = {
    "superadmin": Role.ADMIN,
    "creator_collector": Role.CREATOR,
    "visitor": Role.GUEST,
}

# Which roles each role satisfies when a view requires one.
_ROLE_GRANTS: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.CREATOR, Role.GUEST}),
    Role.CREATOR: frozenset({Role.CREATOR, Role.GUEST}),
    Role.GUEST: frozenset({Role.GUEST}),
}


def parse_role(raw: object) -> Role:
    value = str(raw or "").strip().lower()
    try:
        return Role(value)
    except ValueError:
        pass
    if value in _ROLE_ALIASES:
        return _ROLE_ALIASES[value]
    logger.warning("unknown_role value=%r treated_as=guest", raw)
    return Role.GUEST


def role_satisfies(actual: Role | None, required: Role) -> bool:
    """
    The single capability check used by guards and views.
    """
    if actual is None:
        return False
    return required in _ROLE_GRANTS[actual]


class User(WireModel):
    id: int
    username: str
    email: str | None = None
    role: Role = Role.GUEST
    display_name: str | None = None
    profile_image: str | None = None
    bio: str | None = None
    website: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    tezos_wallet_address: str | None = None
    ethereum_wallet_address: str | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, v: object) -> Role:
        if isinstance(v, Role):
            return v
        return parse_role(v)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class LoginRequest(WireModel):
    username: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def _strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class RegisterRequest(WireModel):
    username: str = Field(..., min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    user_type: Literal["creator_collector", "visitor"] = "visitor"
    display_name: str | None = Field(default=None, max_length=120)

"""Explicit authentication context passed to the store client."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class UserProfile:
    """Basic Google profile of the signed-in user."""

    id: str
    name: str
    email: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class GoogleSession:
    """The bearer token and user a request acts on behalf of."""

    access_token: Optional[str] = None
    profile: Optional[UserProfile] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    @classmethod
    def from_authorization_header(cls, header: Optional[str]) -> "GoogleSession":
        """Build a session from an ``Authorization: Bearer <token>`` header."""
        if not header:
            return cls()
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return cls()
        return cls(access_token=token.strip())


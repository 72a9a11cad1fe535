"""Google authentication for SplitSheet."""

from .session import GoogleSession, UserProfile
from .google import GOOGLE_SCOPES, fetch_user_profile, load_credentials, session_from_credentials

__all__ = [
    "GoogleSession",
    "UserProfile",
    "GOOGLE_SCOPES",
    "fetch_user_profile",
    "load_credentials",
    "session_from_credentials",
]

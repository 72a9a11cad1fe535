"""Google OAuth credentials and user profile lookup."""

import logging
from typing import Optional

import httpx
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from ..config import Settings, settings as default_settings
from ..sheets.errors import NotAuthenticatedError, classify_error
from .session import GoogleSession, UserProfile

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/drive.metadata.readonly",
]


def load_credentials(settings: Optional[Settings] = None, interactive: bool = True) -> Credentials:
    """Get or refresh OAuth2 credentials.

    Uses the cached token when it is still valid, refreshes it when it has
    expired, and otherwise runs the installed-app consent flow in a local
    browser (only when ``interactive`` is set).
    """
    settings = settings or default_settings
    creds = None

    if settings.google_token_path.exists():
        creds = Credentials.from_authorized_user_file(str(settings.google_token_path), GOOGLE_SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        logger.info("Refreshing expired Google access token")
        creds.refresh(Request())
    else:
        if not interactive:
            raise NotAuthenticatedError("No cached Google token. Run 'splitsheet auth' first.")
        if not settings.google_credentials_path.exists():
            raise FileNotFoundError(
                f"Google credentials file not found at {settings.google_credentials_path}. "
                "Please download it from Google Cloud Console."
            )
        flow = InstalledAppFlow.from_client_secrets_file(
            str(settings.google_credentials_path), GOOGLE_SCOPES
        )
        creds = flow.run_local_server(port=0)

    # Save credentials for next run
    settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
    with open(settings.google_token_path, "w") as token:
        token.write(creds.to_json())

    return creds


def session_from_credentials(
    creds: Credentials, profile: Optional[UserProfile] = None
) -> GoogleSession:
    """Wrap OAuth credentials into a session."""
    return GoogleSession(access_token=creds.token, profile=profile)


async def fetch_user_profile(
    session: GoogleSession,
    http_client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> UserProfile:
    """Look up the signed-in user's profile from the OpenID userinfo endpoint."""
    settings = settings or default_settings
    if not session.is_authenticated:
        raise NotAuthenticatedError()

    try:
        if http_client is not None:
            response = await http_client.get(settings.userinfo_url, headers=session.auth_headers())
        else:
            async with httpx.AsyncClient(timeout=settings.request_timeout_seconds) as client:
                response = await client.get(settings.userinfo_url, headers=session.auth_headers())
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise classify_error(e) from e

    data = response.json()
    profile = UserProfile(
        id=data["sub"],
        name=data.get("name") or data.get("email", ""),
        email=data.get("email"),
        image_url=data.get("picture"),
    )
    session.profile = profile
    return profile

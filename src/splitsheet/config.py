"""Configuration management for SplitSheet."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Google OAuth client secrets and cached user token
    google_credentials_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    google_token_path: Path = Path(os.getenv("GOOGLE_TOKEN_PATH", "token.json"))

    # Local association between users and their workbooks
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/splitsheet.db"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Workbook naming, the title is "<product name> - <user name>"
    product_name: str = os.getenv("PRODUCT_NAME", "Expense Tracker Pro")

    # Sheets API
    sheets_api_base_url: str = os.getenv(
        "SHEETS_API_BASE_URL", "https://sheets.googleapis.com/v4/spreadsheets"
    )
    userinfo_url: str = os.getenv(
        "USERINFO_URL", "https://openidconnect.googleapis.com/v1/userinfo"
    )
    request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30.0"))
    max_sheet_rows: int = int(os.getenv("MAX_SHEET_ROWS", "1000"))  # Last row read per sheet


settings = Settings()

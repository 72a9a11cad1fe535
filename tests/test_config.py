"""Tests for the config module."""

from pathlib import Path

from splitsheet.config import Settings, _parse_cors_origins


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        result = _parse_cors_origins()
        assert result == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        """Test parsing empty CORS origins defaults to wildcard."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        assert _parse_cors_origins() == ["*"]


class TestSettings:
    """Test Settings configuration."""

    def test_settings_explicit_values(self, tmp_path):
        """Test Settings built with explicit values."""
        settings = Settings(
            google_credentials_path=tmp_path / "creds.json",
            google_token_path=tmp_path / "token.json",
            database_path=tmp_path / "test.db",
            host="0.0.0.0",
            port=9000,
            debug=True,
            product_name="Trip Splitter",
            max_sheet_rows=250,
            request_timeout_seconds=5.0,
        )

        assert settings.google_credentials_path == tmp_path / "creds.json"
        assert settings.google_token_path == tmp_path / "token.json"
        assert settings.database_path == tmp_path / "test.db"
        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.debug is True
        assert settings.product_name == "Trip Splitter"
        assert settings.max_sheet_rows == 250
        assert settings.request_timeout_seconds == 5.0

    def test_settings_path_handling(self, tmp_path):
        """Test that string paths are converted to Path objects."""
        settings = Settings(
            google_credentials_path=str(tmp_path / "creds.json"),
            google_token_path=str(tmp_path / "token.json"),
            database_path=str(tmp_path / "db.db"),
        )

        assert isinstance(settings.google_credentials_path, Path)
        assert isinstance(settings.google_token_path, Path)
        assert isinstance(settings.database_path, Path)

    def test_settings_sheet_defaults_are_sane(self):
        """Test the Sheets API settings have usable values."""
        settings = Settings()

        assert settings.sheets_api_base_url.startswith("https://")
        assert settings.max_sheet_rows > 1
        assert settings.request_timeout_seconds > 0
        assert settings.product_name

    def test_settings_cors_origins(self):
        """Test CORS origins are kept as given."""
        settings = Settings(cors_allow_origins=["http://localhost:3000", "http://example.com"])
        assert settings.cors_allow_origins == ["http://localhost:3000", "http://example.com"]

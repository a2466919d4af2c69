"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_SESSION_SECRET = "spirit-love-play-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = "sqlite:///./spiritlove.db"

    # Deployment environment ("development" or "production")
    environment: str = "development"

    # Sessions
    session_secret: str = _DEFAULT_SESSION_SECRET  # Generate with: openssl rand -hex 32
    session_cookie_name: str = "slp.sid"
    session_max_age_days: int = 30
    # How old a login may be before change-password asks for a fresh login
    reauth_max_age_minutes: int = 30 * 24 * 60

    # Passwords and reset tokens
    bcrypt_rounds: int = 12
    reset_token_expiry_hours: int = 1
    reset_token_bytes: int = 32

    # Authentication strategy bound to the auth routers
    auth_strategy: str = "local"

    # Couple provisioning (accounts are created without passwords)
    couple_names: list[str] = []
    couple_emails: list[str] = []
    init_db_on_startup: bool = True

    # Email (SendGrid)
    sendgrid_api_key: str = ""
    email_from_address: str = "noreply@spiritloveplay.app"
    email_from_name: str = "Spirit Love Play"
    frontend_url: str = "http://localhost:5000"

    # Application
    log_level: str = "INFO"

    # CORS
    allowed_origins: list[str] = ["http://localhost:5000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        """Session cookies are HTTPS-only in production."""
        return self.is_production

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


def validate_settings(config: Settings) -> None:
    """
    Validate required configuration.

    Strict only in production so that local development and tests run with
    minimal environment setup.
    """
    if not config.is_production:
        return

    errors: list[str] = []

    if not config.session_secret or config.session_secret == _DEFAULT_SESSION_SECRET:
        errors.append("SESSION_SECRET must be set to a secure value in production")

    if not config.frontend_url.startswith(("http://", "https://")):
        errors.append("FRONTEND_URL must be an http(s) URL in production")

    if len(config.couple_emails) > len(config.couple_names):
        errors.append("COUPLE_EMAILS has more entries than COUPLE_NAMES")

    if errors:
        raise RuntimeError("Invalid configuration:\n- " + "\n- ".join(errors))


settings = Settings()

"""Application configuration loaded from environment variables.

Settings for storage, authentication, the API surface and rate limiting.
Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StoreBackend = Literal["json_file", "key_value", "memory"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS (Security)
    # Never set to ["*"]: the session cookie requires credentialed CORS
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Record store
    # key_value has no client of its own; install one with set_record_store()
    store_backend: StoreBackend = "json_file"
    store_path: str = "./data/db.json"
    store_key: str = "ticketdesk:db"

    # Authentication
    auth_token_ttl_hours: int = 24
    auth_cookie_name: str = "ticketdesk.session-token"
    auth_cookie_secure: bool = True
    auth_cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    auth_cookie_domain: str = ""

    # Passwords are stored and compared as plaintext unless hashing is enabled
    password_hashing: bool = False
    bcrypt_rounds: int = 12

    # Validation rules
    min_name_length: int = 1
    require_ticket_status: bool = True

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "5/minute", "10/hour")
    rate_limit_login: str = "5/minute"
    rate_limit_register: str = "10/hour"
    rate_limit_enabled: bool = True  # Disable for testing

    @model_validator(mode="after")
    def check_security(self) -> "Settings":
        """Validate security requirements.

        Checks:
        - CORS must not use wildcard origin (incompatible with credentials)
        - SameSite=None requires Secure flag (browser requirement)
        - Token TTL must be positive
        - bcrypt cost factor must be within the library's accepted range
        - Production must persist data and hash passwords
        """
        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "The session cookie requires credentialed CORS, which is "
                "incompatible with wildcard origins."
            )
            raise ValueError(msg)

        if self.auth_cookie_samesite == "none" and not self.auth_cookie_secure:
            msg = (
                "AUTH_COOKIE_SECURE must be true when AUTH_COOKIE_SAMESITE=none. "
                "Browsers reject SameSite=None cookies without the Secure flag."
            )
            raise ValueError(msg)

        if self.auth_token_ttl_hours <= 0:
            msg = (
                "AUTH_TOKEN_TTL_HOURS must be positive. "
                f"Got: {self.auth_token_ttl_hours}"
            )
            raise ValueError(msg)

        if not 4 <= self.bcrypt_rounds <= 31:
            msg = f"BCRYPT_ROUNDS must be between 4 and 31. Got: {self.bcrypt_rounds}"
            raise ValueError(msg)

        if self.environment == "production":
            if self.store_backend == "memory":
                msg = (
                    "Cannot use the memory store in production. "
                    "Set STORE_BACKEND to json_file or key_value."
                )
                raise ValueError(msg)

            if not self.password_hashing:
                msg = (
                    "PASSWORD_HASHING must be enabled in production. "
                    "Plaintext passwords are only acceptable for local demos."
                )
                raise ValueError(msg)

        return self


settings = Settings()

"""
core/config.py -- DevConnector settings, read from the environment and .env.

get_settings() is the only way in: it builds Settings on first call and
caches it with lru_cache. Nothing else in the tree reads os.environ.
Each field maps to the upper-cased env var of the same name
(token_expire_seconds -> TOKEN_EXPIRE_SECONDS).

The token issuer and verifier never see Settings. The app calls
Settings.auth_config() once at startup and hands the frozen AuthConfig to
both.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every issued token.

  [M7] A missing SECRET_KEY is a hard startup failure in every mode. Tokens
       signed with a throwaway key would silently stop verifying on restart.

  SECRET_KEY is held as SecretStr so it never appears in reprs or logs.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or social/.
"""

from dataclasses import dataclass, field
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class AuthConfig:
    """Signing material shared by TokenIssuer and TokenVerifier.

    Built once at startup and never mutated. secret_key is excluded from
    repr so an accidental log line cannot leak it.
    """

    secret_key: str = field(repr=False)
    algorithm: str = "HS256"
    ttl_seconds: int = 360000


class Settings(BaseSettings):
    """Every field except SECRET_KEY has a default, so tests only need to
    export SECRET_KEY before the first get_settings() call.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured"; the validator below
    # refuses to start with it.
    secret_key: SecretStr = SecretStr("")

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_algorithm: str = "HS256"
    # Seconds. 360000s is 100 hours.
    token_expire_seconds: int = 360000
    token_header: str = "x-auth-token"
    bcrypt_rounds: int = 10

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    auth_db_url: str = "sqlite:///devconnector_auth.db"
    social_db_url: str = "sqlite:///devconnector_social.db"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # GitHub profile enrichment (token optional -- raises the API rate limit)
    # ------------------------------------------------------------------

    github_token: SecretStr = SecretStr("")
    github_repo_count: int = 5

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce SECRET_KEY policy [M6][M7].

        Missing key: refuse to start. There is no development fallback --
        set SECRET_KEY in the environment or .env file.

        Short key (<32 characters): refuse to start.
        """
        key = self.secret_key.get_secret_value()
        if not key:
            raise ValueError(
                "SECRET_KEY is required. " "Set SECRET_KEY in your environment or .env file."
            )
        if len(key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    def auth_config(self) -> AuthConfig:
        """Return the immutable signing configuration for the token layer."""
        return AuthConfig(
            secret_key=self.secret_key.get_secret_value(),
            algorithm=self.token_algorithm,
            ttl_seconds=self.token_expire_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """Cached Settings. Tests that change the environment must call
    get_settings.cache_clear() first.
    """
    return Settings()

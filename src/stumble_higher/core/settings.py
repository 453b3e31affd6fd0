"""Application settings and configuration.

This module defines the process-level configuration options for the Stumble
Higher service. Settings are loaded from environment variables with sensible
defaults.

Scoring thresholds (auto-approve, auto-hide, minimum votes, reward
percentage, reputation weight cap) are deliberately absent here: they live in
the ``system_config`` table so admins can tune them at runtime. See
``stumble_higher.services.system_config``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Stumble Higher", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./stumble.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Background scoring worker
    scoring_worker_enabled: bool = Field(default=False, alias="SCORING_WORKER_ENABLED")
    trending_interval_seconds: float = Field(
        default=3600.0,
        alias="TRENDING_INTERVAL_SECONDS",
    )
    reconcile_interval_seconds: float = Field(
        default=300.0,
        alias="RECONCILE_INTERVAL_SECONDS",
    )
    rewards_check_interval_seconds: float = Field(
        default=6 * 3600.0,
        alias="REWARDS_CHECK_INTERVAL_SECONDS",
    )
    worker_tick_seconds: float = Field(default=30.0, alias="WORKER_TICK_SECONDS")
    job_lock_ttl_seconds: int = Field(default=900, alias="JOB_LOCK_TTL_SECONDS")
    reconcile_batch_size: int = Field(default=100, alias="RECONCILE_BATCH_SIZE")

    # Discovery
    discovery_default_limit: int = Field(default=10, alias="DISCOVERY_DEFAULT_LIMIT")
    discovery_max_limit: int = Field(default=50, alias="DISCOVERY_MAX_LIMIT")

    # Submissions
    default_submission_amount: float = Field(
        default=1000.0,
        alias="DEFAULT_SUBMISSION_AMOUNT",
    )
    genesis_user_id: str = Field(
        default="00000000-0000-0000-0000-000000000000",
        alias="GENESIS_USER_ID",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Studio backend configuration loaded from the environment.

Each concern reads its own prefixed variables (DB_, REDIS_, JWT_,
RATE_LIMIT_, CORS_, API_). Settings aggregates them and refuses to start in
production with the default JWT secret or without a medical data key.
get_settings() caches one instance per process.

Example:
    >>> from gymstudio.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from cryptography.fernet import Fernet
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """Database configuration for the studio data store.

    Stores enrollment applications, the class catalog, class enrollments,
    audit logs and admin users.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full async URL, used instead of the components when set.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        create_schema: Create missing tables at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "gymstudio"
    password: SecretStr = SecretStr("gymstudio_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "gymstudio"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20
    create_schema: bool = True

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured URL points at SQLite."""
        return self.url.startswith("sqlite")


class RedisSettings(BaseSettings):
    """Redis configuration for shared rate limiting.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0
    max_connections: int = 20

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password is not None:
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """Access token signing.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token expiration time.
        issuer: Value of the iss claim, checked on decode.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    issuer: str = "gymstudio"
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class RateLimitSettings(BaseSettings):
    """Client throttling for public endpoints.

    Attributes:
        backend: Storage for the enrollment submission limiter.
        enrollment_max_requests: Submissions allowed per client per window.
        enrollment_window_seconds: Length of the submission window.
        requests_per_minute: Default slowapi limit for other routes.
        storage_uri: slowapi storage URI.
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    backend: Literal["memory", "redis"] = "memory"
    enrollment_max_requests: int = 3
    enrollment_window_seconds: int = 15 * 60
    requests_per_minute: int = 60
    storage_uri: str = "memory://"


class SecuritySettings(BaseSettings):
    """Data protection and bootstrap account configuration.

    Attributes:
        encryption_key: Fernet key for medical fields at rest.
        admin_email: Email of the admin account created at startup.
        admin_password: Password of the bootstrap admin account.
        bcrypt_rounds: Work factor for new password hashes.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    encryption_key: SecretStr | None = Field(
        default=None,
        validation_alias="ENCRYPTION_KEY",
    )
    admin_email: str | None = Field(default=None, validation_alias="ADMIN_EMAIL")
    admin_password: SecretStr | None = Field(default=None, validation_alias="ADMIN_PASSWORD")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, validation_alias="BCRYPT_ROUNDS")

    @field_validator("encryption_key")
    @classmethod
    def check_fernet_key(cls, value: SecretStr | None) -> SecretStr | None:
        """Fail at startup on a key Fernet cannot use."""
        if value is None:
            return value
        try:
            Fernet(value.get_secret_value().encode("utf-8"))
        except ValueError as e:
            raise ValueError(
                "ENCRYPTION_KEY must be a Fernet key (32 url-safe base64-encoded bytes)"
            ) from e
        return value


class CORSSettings(BaseSettings):
    """Origins allowed to call the API from a browser (the studio website).

    Attributes:
        origins: Comma-separated origins, e.g. the public site and admin app.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Allowed origins as a list, blanks dropped."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """uvicorn options for `python -m gymstudio`.

    Workers are ignored when reload is on.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 2
    reload: bool = False


class Settings(BaseSettings):
    """All studio settings, one attribute per concern.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        redis: Redis settings.
        jwt: JWT authentication settings.
        rate_limit: Rate limiting settings.
        security: Encryption and bootstrap admin settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Refuse insecure defaults in production."""
        if self.environment == "production":
            if self.jwt.secret_key.get_secret_value() == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
            if self.security.encryption_key is None:
                raise ValueError(
                    "Medical data encryption requires a key in production. "
                    "Set ENCRYPTION_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """True outside staging and production."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """True in production."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call rereads the environment."""
    get_settings.cache_clear()

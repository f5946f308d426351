"""Application settings and configuration.

This module defines all configuration options for the Love Diary API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    A missing ``JWT_SECRET`` fails at construction time so the process never
    starts with an unusable session signer.
    """

    # Application metadata
    app_name: str = Field(default="Love Diary API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Session tokens
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    session_ttl_seconds: int = Field(default=30 * 24 * 60 * 60, alias="SESSION_TTL_SECONDS")

    # Sign-In with Ethereum
    nonce_ttl_seconds: int = Field(default=600, alias="NONCE_TTL_SECONDS")
    message_max_age_seconds: int = Field(default=600, alias="MESSAGE_MAX_AGE_SECONDS")
    siwe_domain: str | None = Field(default=None, alias="SIWE_DOMAIN")

    # Key-value store; "memory://" selects the in-process store
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # On-chain ownership checks
    ownership_cache_ttl_seconds: int = Field(default=3600, alias="OWNERSHIP_CACHE_TTL_SECONDS")
    base_rpc_url: str = Field(default="https://mainnet.base.org", alias="BASE_RPC_URL")
    character_nft_address: str | None = Field(default=None, alias="CHARACTER_NFT_ADDRESS")
    chain_read_timeout_seconds: float = Field(default=20.0, alias="CHAIN_READ_TIMEOUT_SECONDS")

    # Agent service
    agent_service_url: str = Field(default="http://localhost:8000", alias="AGENT_SERVICE_URL")
    agent_service_secret: str = Field(default="development-secret", alias="AGENT_SERVICE_SECRET")
    agent_timeout_seconds: float = Field(default=20.0, alias="AGENT_TIMEOUT_SECONDS")
    agent_long_timeout_seconds: float = Field(default=30.0, alias="AGENT_LONG_TIMEOUT_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Reject an empty signing secret."""
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @property
    def uses_memory_store(self) -> bool:
        """Return True when the in-process key-value store is configured."""
        return self.redis_url.startswith("memory://")


settings = Settings()

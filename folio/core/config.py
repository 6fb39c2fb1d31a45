"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


_DEFAULT_JWT_SECRET = "dev-insecure-key-change-me"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Covers the two stores the service writes to (metadata database and
    relationship store), token verification, and the policy switches that
    decide how strictly sharing and document parents are checked.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Metadata store
    database_url: str = Field(
        default="sqlite:///./folio.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(default=30)
    db_pool_recycle: int = Field(default=1800)

    # Caller identity
    jwt_secret_key: str = Field(
        default=_DEFAULT_JWT_SECRET,
        description="HS256 secret used to verify bearer tokens"
    )
    jwt_algorithm: str = Field(default="HS256")

    # Relationship store
    # RELATIONSHIP_STORE=memory keeps facts in process memory (dev/tests only).
    relationship_store: str = Field(
        default="openfga",
        description="Relationship store backend: 'openfga' or 'memory'"
    )
    fga_api_url: str = Field(default="https://api.us1.fga.dev")
    fga_store_id: str = Field(default="")
    fga_authorization_model_id: str = Field(default="")
    fga_client_id: str = Field(default="")
    fga_client_secret: str = Field(default="")
    fga_api_token_issuer: str = Field(default="fga.us.auth0.com")
    fga_api_audience: str = Field(default="https://api.us1.fga.dev/")

    # Authorization policy
    # SHARE_POLICY=open lets any caller grant any relation on any object.
    share_policy: str = Field(
        default="open",
        description="Share policy: 'open' (no checks) or 'owner' (caller must own the object)"
    )
    validate_document_parent: bool = Field(
        default=False,
        description="Reject documents whose parent folder row does not exist"
    )

    # Dual-write bookkeeping
    write_intents_enabled: bool = Field(
        default=False,
        description="Journal a pending intent before each create so crashes can be reconciled"
    )
    reconcile_after_seconds: int = Field(
        default=300,
        description="Age at which a pending intent is considered abandoned by its request"
    )

    request_timeout_seconds: float = Field(
        default=0.0,
        description="Per-request deadline for store calls (0 = no deadline)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """Get CORS origins as a list. Wildcards are rejected."""
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('relationship_store')
    @classmethod
    def validate_relationship_store(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ("openfga", "memory"):
            raise ValueError("RELATIONSHIP_STORE must be 'openfga' or 'memory'")
        return v_lower

    @field_validator('share_policy')
    @classmethod
    def validate_share_policy(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ("open", "owner"):
            raise ValueError("SHARE_POLICY must be 'open' or 'owner'")
        return v_lower

    def validate_production_config(self) -> None:
        """Fail startup in production when security-critical settings use dev defaults.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == _DEFAULT_JWT_SECRET:
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if self.relationship_store == "memory":
            errors.append(
                "RELATIONSHIP_STORE=memory loses every grant on restart. "
                "Use RELATIONSHIP_STORE=openfga in production."
            )
        elif not self.fga_store_id:
            errors.append("FGA_STORE_ID must be set when RELATIONSHIP_STORE=openfga.")

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()

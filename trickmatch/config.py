"""Application configuration using Pydantic settings."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from trickmatch.constants import ACTIVE_MATCHES_LIMIT


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment")
    frontend_url: str = Field(default="http://localhost:5173", description="Frontend URL")

    # Storage
    store_backend: Literal["mongo", "memory"] = Field(
        default="mongo", description="Match store backend"
    )

    # MongoDB
    mongodb_host: str = Field(default="localhost", description="MongoDB host")
    mongodb_port: int = Field(default=27017, description="MongoDB port")
    mongodb_database: str = Field(default="trickmatch", description="MongoDB database name")
    mongodb_username: Optional[str] = Field(default=None, description="MongoDB username")
    mongodb_password: Optional[str] = Field(default=None, description="MongoDB password")

    # Redis
    broker_redis_host: str = Field(default="localhost", description="Redis host")
    broker_redis_port: int = Field(default=6379, description="Redis port")
    broker_redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_db: int = Field(default=0, description="Redis database number")

    # Match Configuration
    active_matches_limit: int = Field(
        default=ACTIVE_MATCHES_LIMIT, description="Max matches returned by the active listing"
    )

    @property
    def mongodb_uri(self) -> str:
        """Build MongoDB connection URI."""
        if self.mongodb_username and self.mongodb_password:
            return f"mongodb://{self.mongodb_username}:{self.mongodb_password}@{self.mongodb_host}:{self.mongodb_port}"
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}"

    @property
    def redis_url(self) -> str:
        """Build Redis connection URL."""
        if self.broker_redis_password:
            return f"redis://:{self.broker_redis_password}@{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"
        return f"redis://{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"


# Global settings instance
settings = Settings()

"""Policy service configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class PolicyServiceConfig(BaseSettings):
    """Configuration for the Policy Service and its clients."""

    model_config = SettingsConfigDict(
        env_prefix="POLICY_SERVICE_",
        env_file=".env",
        extra="ignore",  # Ignore extra fields from .env
    )

    # Service settings
    host: str = "127.0.0.1"
    port: int = 8002

    # Client settings
    timeout_seconds: float = 5.0

    # Background writer pool for PolicyEditor.write_async
    write_workers: int = 1

    # Subscriber used by the CLI when none is given
    default_subscriber_id: Optional[str] = None


config = PolicyServiceConfig()

from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RT_RETENTION_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    url: str | None = None
    access_token: SecretStr | None = None
    user: str | None = None
    password: SecretStr | None = None
    timeout: float = 60.0
    retries: int = 3
    retry_wait: float = 5.0
    verify_ssl: bool = True

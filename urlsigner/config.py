from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "url-signer"
    app_env: str = "dev"
    secret_key: SecretStr = SecretStr("change-me-in-production")
    hash_algorithm: str = "sha256"
    default_validity: str = "5 HOURS"
    display_utc_offset_hours: float = 0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="URLSIGNER_")


@lru_cache
def get_settings() -> Settings:
    return Settings()

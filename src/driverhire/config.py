from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "DriverHire"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8787
    log_level: str = "INFO"
    log_sql: bool = False

    secret_key: str = "change-me"
    token_algorithm: str = "HS256"
    access_token_expire_minutes: int = 720
    session_cookie_name: str = "driverhire_session"

    database_url: str = "sqlite:///./data/driverhire.db"
    data_dir: Path = Path("./data")
    storage_dir: Path = Path("./data/storage")
    storage_bucket: str = "documents"
    max_upload_bytes: int = 10 * 1024 * 1024

    web_ui_enabled: bool = True
    cors_origins: str = "http://127.0.0.1:8787"

    bootstrap_manager_email: str = ""
    bootstrap_manager_password: str = ""
    bootstrap_manager_name: str = "Hiring Manager"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def bucket_dir(self) -> Path:
        return self.storage_dir / self.storage_bucket


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

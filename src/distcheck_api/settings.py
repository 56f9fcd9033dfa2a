from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Layout: <data_dir>/<network>/<token>.json
    data_dir: str = Field(
        default="scripts/merkle-paths-output", alias="DISTCHECK_DATA_DIR"
    )

    log_level: str = Field(default="INFO", alias="DISTCHECK_LOG_LEVEL")

    # Request size limit enforced by middleware (bytes); distribution files
    # with tens of thousands of recipients run to several MiB
    max_request_bytes: int = Field(
        default=8388608, alias="DISTCHECK_MAX_REQUEST_BYTES"
    )


settings = Settings()  # load at import

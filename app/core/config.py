from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class BaseConfig(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class CompressionType(str, Enum):
    GZIP = "gz"
    BZIP2 = "bz2"
    ZIP = "zip"


class AppSettings(BaseSettings):
    app_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        alias="APP_NAME",
    )
    app_port: int = Field(
        ...,
        ge=1,
        le=65535,
        alias="APP_PORT",
    )

    app_host: str = Field(default="0.0.0.0")
    app_reload: bool = Field(default=False)
    app_log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")
    log_file: str = Field(default="logs/app.log")
    log_rotation: str = Field(default="1 day")
    log_compression: CompressionType = Field(default=CompressionType.GZIP)

    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")
    cookie_secure: bool = Field(default=True, alias="COOKIE_SECURE")
    upload_temp_dir: str = Field(default="public/temp", alias="UPLOAD_TEMP_DIR")
    max_upload_mb: int = Field(default=512, ge=1, alias="MAX_UPLOAD_MB")
    create_tables_on_startup: bool = Field(default=False, alias="CREATE_TABLES_ON_STARTUP")

    model_config = BaseConfig.model_config


class DatabaseSettings(BaseSettings):
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")
    postgres_user: Optional[str] = Field(default=None, alias="POSTGRES_USER")
    postgres_password: Optional[str] = Field(default=None, alias="POSTGRES_PASSWORD")
    postgres_db: Optional[str] = Field(default=None, alias="POSTGRES_DB")
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, ge=1, le=65535, alias="POSTGRES_PORT")
    debug_sql: bool = Field(default=False)

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    model_config = BaseConfig.model_config


class JWTSettings(BaseSettings):
    secret_key: str = Field(..., min_length=32, alias="SECRET_KEY")
    refresh_token_secret_key: str = Field(..., min_length=32, alias="REFRESH_TOKEN_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=15, ge=1, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_minutes: int = Field(default=60 * 24 * 10, ge=1, alias="REFRESH_TOKEN_EXPIRE_MINUTES")

    model_config = BaseConfig.model_config


class StorageSettings(BaseSettings):
    storage_endpoint_url: Optional[str] = Field(default=None, alias="STORAGE_ENDPOINT_URL")
    storage_access_key: Optional[str] = Field(default=None, alias="STORAGE_ACCESS_KEY")
    storage_secret_key: Optional[str] = Field(default=None, alias="STORAGE_SECRET_KEY")
    storage_bucket: str = Field(default="media", min_length=1, alias="STORAGE_BUCKET")
    storage_region: Optional[str] = Field(default=None, alias="STORAGE_REGION")
    storage_public_base_url: Optional[str] = Field(default=None, alias="STORAGE_PUBLIC_BASE_URL")

    @property
    def public_base_url(self) -> str:
        base = self.storage_public_base_url or self.storage_endpoint_url or "https://s3.amazonaws.com"
        return base.rstrip("/")

    model_config = BaseConfig.model_config


@lru_cache
def get_app_settings() -> AppSettings:
    return AppSettings()


@lru_cache
def get_jwt_settings() -> JWTSettings:
    return JWTSettings()


@lru_cache
def get_storage_settings() -> StorageSettings:
    return StorageSettings()

# hickory/config/settings.py
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Main database (PostgreSQL). DB_URL overrides the individual parts
    db_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "hickory"
    db_user: str = "hickory"
    db_password: str = ""

    environment: str = "development"
    debug: bool = False

    app_prefix: str = ""
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        validation_alias="CORS_ORIGINS",
    )
    socketio_async_mode: str = "eventlet"
    max_request_bytes: int = 1_048_576

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "hickory-api"
    jwt_audience: str = "hickory-web"
    jwt_access_minutes: int = 60

    refresh_token_days: int = 30
    max_active_sessions: int = 5

    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("db_host", "db_name", "db_user", "db_password", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').strip("'")
        return v

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url

        user = quote_plus(self.db_user)
        password = quote_plus(self.db_password)

        return f"postgresql+psycopg2://{user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_raw.split(",") if o.strip()]


settings = Settings()

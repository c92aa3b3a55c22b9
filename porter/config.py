"""Settings via pydantic-settings with PORTER_ env prefix.

DB connection fields use validation_alias to read from the same unprefixed
env vars (DB_PASSWORD, DB_PORT, etc.) that docker-compose uses, and the
Railway token is read from RAILWAY_API_TOKEN so the CLI and the app share
one .env file.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PORTER_", env_file=".env", extra="ignore")

    # DB connection: unprefixed aliases match docker-compose env vars
    db_host: str = Field("localhost", validation_alias="DB_HOST")
    db_port: int = Field(5432, validation_alias="DB_PORT")
    db_user: str = Field("porter", validation_alias="DB_USER")
    db_password: str = Field("porter_dev_password", validation_alias="DB_PASSWORD")
    db_name: str = Field("porter", validation_alias="DB_NAME")
    # Full URL override, e.g. sqlite+aiosqlite:///porter.db for local runs
    database_url: str = Field("", validation_alias="DATABASE_URL")

    db_pool_size: int = 10
    db_max_overflow: int = 5
    log_level: str = "info"

    # Runtime
    host: str = "0.0.0.0"
    port: int = 8000

    # Railway
    railway_api_endpoint: str = "https://backboard.railway.app/graphql/v2"
    railway_api_token: str = Field("", validation_alias="RAILWAY_API_TOKEN")

    # Deployment polling
    deployment_poll_interval: float = 5.0  # seconds between status checks
    deployment_max_wait: int = 300  # seconds

    # Chats
    default_chat_title: str = "New Chat"

    @model_validator(mode="after")
    def _validate_polling(self) -> "Settings":
        if self.deployment_poll_interval <= 0:
            raise ValueError("deployment_poll_interval must be > 0")
        if self.deployment_max_wait <= 0:
            raise ValueError("deployment_max_wait must be > 0")
        return self

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # uNoGS on RapidAPI; empty values are reported per call, not at startup
    api_key: str = Field(default="", alias="API_KEY")
    api_host: str = Field(default="", alias="API_HOST")
    catalog_base_url: str = Field(default="https://unogs-unogs-v1.p.rapidapi.com", alias="CATALOG_BASE_URL")
    request_timeout_s: float = Field(default=10.0, alias="REQUEST_TIMEOUT_S")

    search_result_limit: int = Field(default=5, alias="SEARCH_RESULT_LIMIT")
    # Nominal daily allowance, advisory only
    daily_call_allowance: int = Field(default=50, alias="DAILY_CALL_ALLOWANCE")

    environment: str = Field("dev", alias="ENVIRONMENT")  # dev|prod
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    # --- Build info ---
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    git_sha: str | None = Field(None, alias="GIT_SHA")

    def resolved_database_url(self) -> str:
        return self.database_url or "sqlite:///./.local/netwatch.db"

    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.api_host)


settings = Settings()

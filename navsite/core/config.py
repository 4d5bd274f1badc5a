from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "navsite-api"
    environment: str = "dev"
    base_path: str = ""
    store_base_url: str = "https://open.feishu.cn/open-apis"
    store_timeout_seconds: float = 10.0
    store_auth_timeout_seconds: float = 5.0
    token_refresh_margin_seconds: int = 300
    app_id: str | None = None
    app_secret: str | None = None
    app_token: str | None = None
    table_id: str | None = None
    default_table_sentinel: str = "default"
    default_table_name: str = "默认导航"
    staging_app_id: str | None = None
    staging_app_secret: str | None = None
    staging_app_token: str | None = None
    staging_table_id: str | None = None
    meta_app_token: str | None = None
    meta_table_id: str | None = None
    dataset_app_token: str | None = None
    admin_password: str = "admin123"
    session_secret: str = "navsite-secret-key-change-in-production"
    session_max_age_seconds: int = 24 * 60 * 60
    uncategorized_label: str = "其它"
    submission_default_sort: int = 200
    public_pending_limit: int = 100
    staging_delete_attempts: int = 3
    staging_delete_backoff_seconds: float = 0.5
    navigation_mock_fallback: bool = False
    favicon_service_url: str = "https://www.google.com/s2/favicons"
    favicon_timeout_seconds: float = 5.0
    otel_enabled: bool = True
    otel_service_name: str = "navsite-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0

    model_config = SettingsConfigDict(env_prefix="NAV_", extra="ignore")

    @field_validator("base_path")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def resolved_staging_app_id(self) -> str | None:
        return self.staging_app_id or self.app_id

    @property
    def resolved_staging_app_secret(self) -> str | None:
        return self.staging_app_secret or self.app_secret

    @property
    def resolved_staging_app_token(self) -> str | None:
        return self.staging_app_token or self.app_token

    @property
    def resolved_meta_app_token(self) -> str | None:
        return self.meta_app_token or self.app_token

    @property
    def resolved_dataset_app_token(self) -> str | None:
        return self.dataset_app_token or self.app_token

    @property
    def staging_shares_credentials(self) -> bool:
        return (
            self.resolved_staging_app_id == self.app_id
            and self.resolved_staging_app_secret == self.app_secret
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

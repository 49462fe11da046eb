from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="SEO Audit Relay", alias="APP_NAME")
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV", "app_env"),
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        alias="ALLOWED_ORIGINS",
    )
    trust_proxy: bool = Field(default=False, alias="TRUST_PROXY")

    google_pagespeed_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "NEXT_PUBLIC_GOOGLE_PAGESPEED_API_KEY",
            "GOOGLE_PAGESPEED_API_KEY",
            "google_pagespeed_api_key",
        ),
    )
    pagespeed_api_url: str = Field(
        default="https://www.googleapis.com/pagespeedonline/v5/runPagespeed",
        alias="PAGESPEED_API_URL",
    )
    pagespeed_timeout: float = Field(default=60.0, alias="PAGESPEED_TIMEOUT")
    pagespeed_max_attempts: int = Field(default=3, ge=1, alias="PAGESPEED_MAX_ATTEMPTS")
    pagespeed_backoff_base: float = Field(default=1.0, ge=0, alias="PAGESPEED_BACKOFF_BASE")

    whatsapp_access_token: str | None = Field(default=None, alias="WHATSAPP_ACCESS_TOKEN")
    whatsapp_instance_id: str | None = Field(default=None, alias="WHATSAPP_INSTANCE_ID")
    whatsapp_api_url: str = Field(
        default="https://app.simplywhatsapp.com/api",
        alias="WHATSAPP_API_URL",
    )
    whatsapp_timeout: float = Field(default=30.0, alias="WHATSAPP_TIMEOUT")

    audit_limit: int = Field(default=3, ge=1, alias="AUDIT_LIMIT")
    audit_reset_interval_hours: float = Field(
        default=24,
        gt=0,
        alias="AUDIT_RESET_INTERVAL_HOURS",
    )
    max_phone_numbers_per_request: int = Field(
        default=3,
        ge=1,
        alias="MAX_PHONE_NUMBERS_PER_REQUEST",
    )
    report_brand_name: str = Field(default="Marketiq Junction", alias="REPORT_BRAND_NAME")
    report_timezone: str = Field(default="Asia/Kolkata", alias="REPORT_TIMEZONE")

    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000, alias="RATE_LIMIT_WINDOW_MS")
    rate_limit_max_requests: int = Field(default=100, alias="RATE_LIMIT_MAX_REQUESTS")
    audit_rate_limit_window_ms: int = Field(
        default=60 * 60 * 1000,
        alias="AUDIT_RATE_LIMIT_WINDOW_MS",
    )
    audit_rate_limit_max_requests: int = Field(
        default=3,
        alias="AUDIT_RATE_LIMIT_MAX_REQUESTS",
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def allowed_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.whatsapp_access_token and self.whatsapp_instance_id)

    def missing_credentials(self) -> list[str]:
        missing = []
        if not self.whatsapp_access_token:
            missing.append("WHATSAPP_ACCESS_TOKEN")
        if not self.whatsapp_instance_id:
            missing.append("WHATSAPP_INSTANCE_ID")
        if not self.google_pagespeed_api_key:
            missing.append("NEXT_PUBLIC_GOOGLE_PAGESPEED_API_KEY")
        return missing


settings = Settings()

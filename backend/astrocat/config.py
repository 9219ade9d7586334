from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "development"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Saju reading backend. "development" talks to a locally running backend,
    # every other environment goes to production.
    saju_backend_dev_url: str = "http://127.0.0.1:8000"
    saju_backend_prod_url: str = "https://saju.trinity-apps.net"
    saju_backend_timeout_seconds: float = 120.0

    # Hosts the image download proxy is allowed to fetch from (comma separated).
    # Empty means any http(s) host.
    image_hosts_raw: str = (
        "catbot-image-bucket.s3.ap-northeast-2.amazonaws.com,"
        "oaidalleapiprodscus.blob.core.windows.net"
    )
    image_download_timeout_seconds: float = 30.0

    slack_webhook_url: str | None = None
    webhook_timeout_seconds: float = 10.0

    # Kakao: the JS key is public and rendered into pages, the access token is
    # used for server-side "send to me" sharing.
    kakao_js_key: str | None = None
    kakao_access_token: str | None = None
    kakao_api_base_url: str = "https://kapi.kakao.com"
    kakao_timeout_seconds: float = 10.0

    # GA4 Measurement Protocol
    ga_measurement_id: str | None = None
    ga_api_secret: str | None = None
    ga_collect_url: str = "https://www.google-analytics.com/mp/collect"
    analytics_timeout_seconds: float = 5.0

    rate_limit_enabled: bool = True
    cors_origins_raw: str = ""

    def is_development(self) -> bool:
        return self.app_env.strip().lower() == "development"

    def saju_backend_url(self) -> str:
        base = self.saju_backend_dev_url if self.is_development() else self.saju_backend_prod_url
        return base.rstrip("/")

    def image_hosts(self) -> set[str]:
        return {item.strip().lower() for item in self.image_hosts_raw.split(",") if item.strip()}

    def analytics_enabled(self) -> bool:
        return bool(self.ga_measurement_id and self.ga_api_secret)

    def cors_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if not raw:
            return []
        return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

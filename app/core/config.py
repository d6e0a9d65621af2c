"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    DATABASE_URL: str = "sqlite:///./snappoint.db"
    JWT_ACCESS_SECRET: str
    JWT_ACCESS_EXPIRY_MINUTES: int = 60
    SERVICE_SECRET: str | None = None
    REQUEST_TIMEOUT_SECONDS: int = 60
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    GOOGLE_PLACES_API_KEY: str | None = None
    GOOGLE_PLACES_TIMEOUT_SECONDS: int = 10
    GOOGLE_PLACES_LANGUAGE_CODE: str = ""
    GOOGLE_PLACES_MAX_PAGES: int = 3
    GOOGLE_PLACES_PAGE_DELAY_SECONDS: float = 2.0
    INGESTION_MAX_PLACES_PER_PAGE: int = 20
    INGESTION_CONTEXT_RADIUS_KM: float = 10.0
    INGESTION_TIMEOUT_SECONDS: int = 20
    NEARBY_INGESTION_ENABLED: bool = True
    NEARBY_DEFAULT_RADIUS_KM: float = 20.0
    NEARBY_DEFAULT_MAX_PLACES: int = 50
    NEARBY_FRESHNESS_THRESHOLD: int = 20
    USER_VISITED_POINTS: int = 1
    NO_POSTS_BONUS_POINTS: int = 3
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Authorization,Content-Type"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    ENABLE_HSTS: bool = False
    HSTS_MAX_AGE_SECONDS: int = 31536000
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("GOOGLE_PLACES_MAX_PAGES", mode="before")
    @classmethod
    def _clamp_google_places_max_pages(cls, value: object) -> int:
        # Nearby Search는 최대 3페이지(60건)까지만 page token을 발급한다.
        try:
            numeric = int(value) if value is not None else 3
        except (TypeError, ValueError):
            numeric = 3
        return min(3, max(1, numeric))

    @field_validator("GOOGLE_PLACES_PAGE_DELAY_SECONDS", mode="before")
    @classmethod
    def _clamp_google_places_page_delay(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 2.0
        except (TypeError, ValueError):
            numeric = 2.0
        return max(0.0, numeric)

    @field_validator("INGESTION_MAX_PLACES_PER_PAGE", mode="before")
    @classmethod
    def _clamp_ingestion_max_places_per_page(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 20
        except (TypeError, ValueError):
            numeric = 20
        return min(20, max(1, numeric))

    @field_validator("NEARBY_DEFAULT_RADIUS_KM", mode="before")
    @classmethod
    def _clamp_nearby_default_radius(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 20.0
        except (TypeError, ValueError):
            numeric = 20.0
        return min(50.0, max(0.1, numeric))


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for auth admin calls (user emails)
    supabase_timeout: int = 10  # seconds, PostgREST and Storage requests

    # Storage buckets
    avatars_bucket: str = "avatars"
    news_images_bucket: str = "news-images"
    media_files_bucket: str = "media-files"
    max_activity_images: int = 10

    # Site routing
    site_url: str = "http://localhost:5173"
    dashboard_path: str = "/dashboard"
    public_root_path: str = "/"

    # App
    app_name: str = "school-portal-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    admission_rate_limit: str = "5/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def oauth_redirect_url(self) -> str:
        return self.site_url.rstrip("/") + self.dashboard_path

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str
    
    # Site (public base URL and the anonymous client key handed to browsers)
    site_url: str = "http://localhost:8000"
    site_anon_key: str = ""
    allowed_origins: str = ""
    
    # Email
    email_mode: str = "dev"  # dev | prod
    sendgrid_api_key: str = ""
    email_from: str = "noreply@samit.example.com"
    
    # Auth
    secret_key: str
    magic_link_ttl_minutes: int = 30
    session_max_age_days: int = 30
    
    # Object storage
    storage_dir: str = "/data/storage"
    
    # Admin-owned organization used for jobs posted by the admin team
    admin_org_name: str = "SAMIT Official"
    
    # App
    debug: bool = False

    def get_site_url(self) -> str:
        """Site URL without a trailing slash."""
        return self.site_url.rstrip("/")


settings = Settings()

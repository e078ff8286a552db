"""Storefront Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront Checkout"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    # Backend API
    api_base_url: str = "http://localhost:8001"
    api_token: Optional[str] = None
    api_timeout: float = 30.0

    # Presentation
    currency: str = "MXN"
    locale: str = "es"
    default_country: str = "Mexico"

    # Cart lifetime for lazily created carts
    cart_ttl_days: int = 7
    cart_session_cookie: str = "cart_session"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "STOREFRONT_"
        case_sensitive = False

    @property
    def api_configured(self) -> bool:
        """Check if the backend URL is set"""
        return bool(self.api_base_url)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

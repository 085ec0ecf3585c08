"""
Configuration module for the catalog sync service
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Products API Configuration
    PRODUCTS_API_URL: str = "https://famme.no/products.json"
    CONNECT_TIMEOUT: float = 30.0
    READ_TIMEOUT: float = 60.0

    # Sync Configuration
    CLEAR_ON_RESTART: bool = False
    MAX_PRODUCTS: int = 50
    SYNC_ENABLED: bool = True
    SYNC_INTERVAL_SECONDS: float = 3600.0
    SYNC_INITIAL_DELAY_SECONDS: float = 0.0

    # Database Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./catalog.db"

    # Application Settings
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()

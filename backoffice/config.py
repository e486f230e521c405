"""Application Configuration"""

from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backoffice.services.attachment_service import UploadPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Application
    APP_NAME: str = "Dealer Bill Back-Office"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"
    
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    
    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    
    # CORS (3000 = Next.js admin panel)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"
    ALLOWED_METHODS: str = "GET,POST,PUT,OPTIONS"
    ALLOWED_HEADERS: str = "*"
    
    # Bill attachments (local disk)
    UPLOAD_DIR: str = "uploads/dealerbills"
    UPLOAD_URL_PATH: str = "/uploads/dealerbills"
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024
    UPLOAD_ALLOWED_EXTENSIONS: str = "jpeg,jpg,png,pdf"
    
    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )
    
    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]
    
    @field_validator("ALLOWED_METHODS")
    @classmethod
    def parse_methods(cls, v: str) -> List[str]:
        """Parse comma-separated methods into a list"""
        return [method.strip() for method in v.split(",")]
    
    @field_validator("UPLOAD_ALLOWED_EXTENSIONS")
    @classmethod
    def parse_extensions(cls, v: str) -> List[str]:
        """Parse comma-separated extensions, lowercased and without dots"""
        return [ext.strip().lower().lstrip(".") for ext in v.split(",") if ext.strip()]
    
    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"
    
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")
    
    def upload_policy(self) -> UploadPolicy:
        """Build the attachment policy handed to the attachment store"""
        return UploadPolicy(
            directory=self.UPLOAD_DIR,
            max_bytes=self.UPLOAD_MAX_BYTES,
            allowed_extensions=frozenset(self.UPLOAD_ALLOWED_EXTENSIONS),
        )


# Global settings instance
settings = Settings()

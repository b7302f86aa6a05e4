"""Application Configuration"""

from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Application
    APP_NAME: str = "Smart Cart Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"
    
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    
    # Storage (bills.json / sessions.json snapshots)
    STORAGE_BACKEND: str = "json"
    DATA_DIR: str = "data"
    SESSIONS_FILE: str = "sessions.json"
    BILLS_FILE: str = "bills.json"
    
    # Payment gateway (Razorpay)
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    CURRENCY: str = "INR"
    
    # Bills
    BILL_ID_PREFIX: str = "A"
    BILL_ID_START: int = 100
    # Re-verifying a paid session mints another bill unless disabled
    ALLOW_PAID_REVERIFICATION: bool = True
    
    # Cart device notification
    NOTIFY_TIMEOUT_SECONDS: float = 5.0
    NOTIFY_PATH: str = "/payment-status"
    
    # Payment page served by the front end
    PAYMENT_PAGE_BASE_URL: str = "https://smart-trolley-ten.vercel.app"
    
    # CORS
    ALLOWED_ORIGINS: str = "https://smart-trolley-ten.vercel.app,http://localhost:3000"
    ALLOWED_METHODS: str = "GET,POST"
    ALLOWED_HEADERS: str = "Content-Type"
    
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
    
    @field_validator("ALLOWED_METHODS", "ALLOWED_HEADERS")
    @classmethod
    def parse_csv(cls, v: str) -> List[str]:
        """Parse comma-separated values into a list"""
        return [item.strip() for item in v.split(",")]
    
    @field_validator("RAZORPAY_KEY_SECRET")
    @classmethod
    def require_signing_secret(cls, v: str) -> str:
        """The gateway secret signs every payment callback; refuse to start without it"""
        if not v.strip():
            raise ValueError("RAZORPAY_KEY_SECRET must be set")
        return v
    
    @field_validator("BILL_ID_PREFIX")
    @classmethod
    def check_bill_prefix(cls, v: str) -> str:
        """Bill ids are the prefix character followed by the number"""
        if len(v) != 1:
            raise ValueError("BILL_ID_PREFIX must be a single character")
        return v
    
    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'json' or 'memory'")
        return v
    
    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()

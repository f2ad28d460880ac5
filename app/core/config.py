from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import os
from typing import List

load_dotenv()

class Settings(BaseSettings):
    """Defines and validates all environment variables for the application.
    
    Pydantic automatically reads variables from the environment or a .env file,
    validates their types, and provides default values if they are not set.
    """
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./donations.db")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "a-secret-key")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

    SENDGRID_API_KEY: str = os.getenv("SENDGRID_API_KEY", "")
    EMAIL_SENDER: str = os.getenv("EMAIL_SENDER", "no-reply@yourdomain.com")
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    FORECAST_LOOKBACK_MONTHS: int = int(os.getenv("FORECAST_LOOKBACK_MONTHS", 24))
    FORECAST_HORIZON_MONTHS: int = int(os.getenv("FORECAST_HORIZON_MONTHS", 6))
    AB_TEST_SIGNIFICANCE_LEVEL: float = float(os.getenv("AB_TEST_SIGNIFICANCE_LEVEL", 0.05))

    FRONTEND_BASE_URL: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"

    @property
    def admin_emails(self) -> List[str]:
        return [e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()]

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()

# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./pharmacy_store.db"

    # Razorpay credentials; the key secret also signs payment callbacks
    RAZORPAY_API_URL: str = "https://api.razorpay.com"
    RAZORPAY_KEY_ID: str = "rzp_test_key"
    RAZORPAY_KEY_SECRET: str = "rzp_test_secret"
    CURRENCY: str = "INR"

    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()

from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "CareSlot"
    API_V1_STR: str = "/api/v1"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "careslot"
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False
    DB_POOL_TIMEOUT: int = 5

    # Every storage call is bounded by this timeout
    STORE_TIMEOUT_SECONDS: float = 5.0
    STORE_RETRY_AFTER_SECONDS: int = 1

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    # Tokens are issued by the portal's identity service
    TOKEN_URL: str = "/auth/token"

    # New bookings start as "pending" until confirmed by the doctor or payment
    BOOKING_REQUIRES_CONFIRMATION: bool = True
    AVAILABILITY_WINDOW_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

settings = Settings()

from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./skuhub.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    SQLITE_BUSY_TIMEOUT_SECONDS: int = 30

    # SKU generation defaults, used when a business has not configured its own
    SKU_DEFAULT_FORMAT: str = "{BUSINESS}-{SEQ}"
    SKU_DEFAULT_DIGITS: int = 4

    # 999,999,999.99 in cents
    MAX_PRICE_CENTS: int = 99_999_999_999
    DEFAULT_PRICE_CHANGE_REASON: str = "BARCODE_LABEL_PRINT"
    PRICE_HISTORY_DEFAULT_LIMIT: int = 50
    PRICE_HISTORY_MAX_LIMIT: int = 500

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()

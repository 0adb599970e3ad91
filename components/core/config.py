from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database settings
    DB_URL: Optional[str] = None  # Optional full DB URL
    DB_USER: str = "root"
    DB_PASSWORD: str = "toolrent"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "toolrent"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # API settings
    API_VERSION: str = "v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Pricing
    HOUSE_DAILY_FINE_RATE: float = 2500.0

    # Reserved customer used for internally originated ledger events
    SYSTEM_CUSTOMER_NAME: str = "ToolRent System"
    SYSTEM_CUSTOMER_RUT: str = "99999999-9"
    SYSTEM_CUSTOMER_EMAIL: str = "system@toolrent.com"
    SYSTEM_CUSTOMER_PHONE: str = "000"

    # JWT
    SECRET_KEY: str = "change-me"  # set via ENV in production
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_default = True

    @property
    def async_db_url(self) -> str:
        """Get asynchronous database URL."""
        if self.DB_URL:
            return self.DB_URL
        return f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached Settings instance to avoid reloading .env file on every access
    """
    return Settings()


settings = get_settings()

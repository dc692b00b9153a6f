from pydantic_settings import BaseSettings
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    PROJECT_NAME: str = "Finance Assistant Behavior Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    ALGORITHM: str = "HS256"

    JWT_KEY: str = "dev-jwt-key-change-in-production-7f3a9c1e5b"
    JWT_ISSUER: str = "finance-assistant-bot"
    JWT_AUDIENCE: str = "finance-assistant-behavior"

    # Leave empty to build an MSSQL connection string from the DB_* values
    DATABASE_URL: Optional[str] = "sqlite+aiosqlite:///./data/finance_assistant.db"

    DB_SERVER: str = "."
    DB_NAME: str = "FinanceAssistant"
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_DRIVER: str = "ODBC Driver 17 for SQL Server"
    DB_TRUSTED_CONNECTION: bool = True
    DB_TRUST_SERVER_CERTIFICATE: bool = True

    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins_list(self) -> List[str]:
        if isinstance(self.ALLOWED_ORIGINS, list):
            return self.ALLOWED_ORIGINS
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Behavioral engine policy
    BEHAVIOR_TREND_MONTHS: int = 6  # Trailing months fetched for trends
    BEHAVIOR_BASELINE_MONTHS: int = 3  # Rolling baseline window
    BEHAVIOR_ANOMALY_THRESHOLD: float = 0.15  # Fraction above baseline to flag
    BEHAVIOR_RECURRING_MIN_MONTHS: int = 2
    BEHAVIOR_RECURRING_FULL_CONFIDENCE_MONTHS: int = 4
    BEHAVIOR_DRIFT_SCALE: float = 50.0  # Summed deviation % that maps to drift 1.0

    # Self-control indicator weights
    SELF_CONTROL_ANOMALY_WEIGHT: float = 0.15
    SELF_CONTROL_ANOMALY_CAP: float = 0.5
    SELF_CONTROL_DRIFT_WEIGHT: float = 0.3
    SELF_CONTROL_SPIKE_WEIGHT: float = 0.2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

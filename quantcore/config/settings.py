# quantcore/config/settings.py
"""
Configuration settings using Pydantic for type safety and validation

Only the host application reads these. Calculators receive their knobs through
the explicit config objects in ``quantcore.config.defaults``.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

PACKAGE_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PACKAGE_ROOT.parent / ".env"


class Settings(BaseSettings):
    """
    Application settings with validation
    """

    model_config = ConfigDict(
        extra="ignore",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "quantcore"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    DEBUG: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="text", pattern="^(text|json)$")
    LOG_FILE_PATH: str | None = None
    LOG_ROTATION: str = "100 MB"
    LOG_RETENTION: str = "30 days"

    # Backtesting
    DEFAULT_INITIAL_CAPITAL: float = Field(default=10000.0, gt=0)

    # Risk
    RISK_FREE_RATE: float = Field(default=0.02, ge=0, lt=1)
    VAR_CONFIDENCE_LEVEL: float = Field(default=0.95, gt=0.5, lt=1)

    # Monte Carlo
    DEFAULT_NUM_SIMULATIONS: int = Field(default=1000, ge=1)
    DEFAULT_HORIZON_DAYS: int = Field(default=252, ge=1)
    RANDOM_SEED: int | None = None

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance
    """
    return Settings()

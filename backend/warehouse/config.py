from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    DATA_DIR: Path = BASE_DIR / "data"
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "warehouse-inventory"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()

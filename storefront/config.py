from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings

ROOT_DIR = Path(__file__).resolve().parents[1]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "storefront")
    STORAGE_BACKEND: Literal["memory", "file", "mongo"] = "file"
    STORAGE_DIR: str = str(ROOT_DIR / "data")
    CATALOG_URL: str = "https://dummyjson.com"
    CATALOG_TIMEOUT: float = 10.0
    PAGE_SIZE: int = 12
    DEBOUNCE_MS: int = 500
    LOG_LEVEL: str = "INFO"

    @property
    def debounce_seconds(self) -> float:
        return self.DEBOUNCE_MS / 1000

settings = Settings()

def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )

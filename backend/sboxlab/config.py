import os
import logging
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

LOGGER_NAME = "sboxlab"


class Settings(BaseModel):
    # S-Box generation
    matrix_max_attempts: int = Field(default=100, ge=1)
    random_seed: Optional[int] = Field(default=None, description="Seed for reproducible generation")

    # Analysis
    analysis_workers: int = Field(default=4, ge=1)

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    seed = os.getenv("SBOXLAB_SEED")
    return Settings(
        matrix_max_attempts=int(os.getenv("SBOXLAB_MATRIX_MAX_ATTEMPTS", "100")),
        random_seed=int(seed) if seed not in (None, "") else None,
        analysis_workers=int(os.getenv("SBOXLAB_ANALYSIS_WORKERS", "4")),
        log_level=os.getenv("SBOXLAB_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    settings = settings or load_settings()
    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    BASE_DIR = Path(__file__).resolve().parent.parent
    DATA_DIR = Path(os.getenv("DOCSTORE_DATA_DIR", BASE_DIR / "data"))
    # "raise" surfaces unreadable collection files, "empty" logs and treats them as empty
    ON_CORRUPT = os.getenv("DOCSTORE_ON_CORRUPT", "raise").strip().lower()
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


class DevConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()


class ProdConfig(Config):
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = logging.getLevelName(logging.WARNING)

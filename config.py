"""
Settings for the Business Card Scan API.

Every value can be overridden with a ``CARDSCAN_``-prefixed environment
variable (a ``.env`` file is read first).
"""

import os
import logging
from typing import Any, List, Mapping, Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "CARDSCAN_"


def _env(key: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + key, default)


def _env_flag(key: str, default: bool = False) -> bool:
    return _env(key, str(default)).strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str, default: str) -> List[str]:
    return [item.strip() for item in _env(key, default).split(",") if item.strip()]


class Config:
    """Base settings shared by every environment.

    Attributes:
        UPLOAD_FOLDER: Where uploaded card images wait for OCR
        OCR_LANGUAGES: EasyOCR language codes
        OCR_MIN_CONFIDENCE: OCR results below this are discarded
        LOCALE: Lexicon profile used by the contact parser
        DEFAULT_LINE_CONFIDENCE: Confidence given to lines without one
        CORS_ORIGINS: Origins allowed to call /api/*
    """

    # Server
    HOST: str = _env("HOST", "0.0.0.0")
    PORT: int = int(_env("PORT", "5000"))
    DEBUG: bool = _env_flag("DEBUG")
    TESTING: bool = _env_flag("TESTING")
    SECRET_KEY: str = _env("SECRET_KEY", "dev-secret-key-change-in-production")
    CORS_ORIGINS: List[str] = _env_list("CORS_ORIGINS", "*")

    # Uploads
    MAX_CONTENT_LENGTH: int = int(_env("MAX_UPLOAD_MB", "16")) * 1024 * 1024
    UPLOAD_FOLDER: str = _env("UPLOAD_FOLDER", "uploads")
    ALLOWED_EXTENSIONS: frozenset = frozenset({"png", "jpg", "jpeg", "gif", "bmp", "webp"})

    # OCR
    OCR_LANGUAGES: List[str] = _env_list("OCR_LANGUAGES", "ko,en")
    OCR_GPU: bool = _env_flag("OCR_GPU")
    OCR_MIN_CONFIDENCE: float = float(_env("OCR_MIN_CONFIDENCE", "0.0"))

    # Parser
    LOCALE: str = _env("LOCALE", "ko")
    DEFAULT_LINE_CONFIDENCE: float = float(_env("DEFAULT_LINE_CONFIDENCE", "0.5"))

    # Logging
    LOG_LEVEL: str = _env("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def init_app(cls, app) -> None:
        """Copy settings into the Flask app, create the upload folder and set up logging."""
        app.config.from_object(cls)
        os.makedirs(cls.UPLOAD_FOLDER, exist_ok=True)
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL.upper(), logging.INFO),
            format=cls.LOG_FORMAT
        )
        logger.info(f"Configuration {cls.__name__} loaded (locale={cls.LOCALE})")


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    LOG_LEVEL = "DEBUG"


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name: Optional[str] = None) -> type:
    """Get configuration class by name (``CARDSCAN_ENV`` when not given).

    Unknown names fall back to DevelopmentConfig.
    """
    if config_name is None:
        config_name = _env("ENV", "development")
    return config_by_name.get(config_name, DevelopmentConfig)


def is_allowed_file(filename: str, allowed_extensions) -> bool:
    """Check an upload's extension against the allowed set."""
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed_extensions


def get_parser_settings(settings: Mapping[str, Any]) -> dict:
    """Pick the settings that shape contact parsing out of an app config."""
    return {
        "locale": settings["LOCALE"],
        "default_line_confidence": settings["DEFAULT_LINE_CONFIDENCE"],
        "ocr_languages": settings["OCR_LANGUAGES"],
        "ocr_min_confidence": settings["OCR_MIN_CONFIDENCE"],
    }

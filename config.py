"""Application configuration module."""

import os


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///wrench-forum.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")

    # Forum rules
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
    VERIFICATION_MIN_DETAIL = int(os.getenv("VERIFICATION_MIN_DETAIL", "50"))
    POST_TITLE_MAX_LENGTH = int(os.getenv("POST_TITLE_MAX_LENGTH", "300"))
    REPORT_REASON_MAX_LENGTH = int(os.getenv("REPORT_REASON_MAX_LENGTH", "1000"))
    POSTS_PAGE_SIZE = int(os.getenv("POSTS_PAGE_SIZE", "25"))
    STORE_DEFAULT_CATEGORIES = (
        "OEM Parts",
        "Aftermarket Parts",
        "Tools",
        "Fluids & Chemicals",
        "Electronics",
        "General",
    )

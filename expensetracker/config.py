import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def _flag(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'expensetracker.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _flag("SESSION_COOKIE_SECURE")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON = _flag("LOG_JSON")

    # Where the sign-in page sends users to authenticate
    IDENTITY_PROVIDER_LOGIN_URL = os.getenv("IDENTITY_PROVIDER_LOGIN_URL", "")
    DEV_LOGIN_ENABLED = _flag("DEV_LOGIN_ENABLED")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
    LOG_JSON = False
    DEV_LOGIN_ENABLED = True

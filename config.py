import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///finance_db.sqlite3")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
    GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")
    GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "10"))
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

    # Login session cookie (separate from Flask's signed session cookie)
    AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "session-token")
    AUTH_SESSION_DAYS = int(os.getenv("AUTH_SESSION_DAYS", "7"))
    # Role given to accounts created on first GitHub login
    DEFAULT_USER_ROLE = os.getenv("DEFAULT_USER_ROLE", "USER")

    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "False").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    GITHUB_CLIENT_ID = "test-client-id"
    GITHUB_CLIENT_SECRET = "test-client-secret"
    APP_BASE_URL = "http://localhost"
    DEFAULT_USER_ROLE = "USER"
    SESSION_COOKIE_SECURE = False

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkshelf.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    AUTH_COOKIE_NAME = os.environ.get("AUTH_COOKIE_NAME", "token")
    AUTH_TOKEN_MAX_AGE = int(os.environ.get("AUTH_TOKEN_MAX_AGE", str(7 * 24 * 3600)))
    AUTH_COOKIE_SECURE = os.environ.get("AUTH_COOKIE_SECURE", "0") == "1"

    CONTENT_FETCH_TIMEOUT = float(os.environ.get("CONTENT_FETCH_TIMEOUT", "10"))
    CONTENT_MAX_BYTES = int(os.environ.get("CONTENT_MAX_BYTES", "2500000"))

    SUMMARY_API_URL = os.environ.get(
        "SUMMARY_API_URL", "https://api.openai.com/v1/chat/completions"
    )
    SUMMARY_API_KEY = os.environ.get("SUMMARY_API_KEY", "")
    SUMMARY_MODEL = os.environ.get("SUMMARY_MODEL", "gpt-3.5-turbo")
    SUMMARY_MAX_TOKENS = int(os.environ.get("SUMMARY_MAX_TOKENS", "150"))
    SUMMARY_TIMEOUT = float(os.environ.get("SUMMARY_TIMEOUT", "30"))
    SUMMARY_INPUT_CHARS = int(os.environ.get("SUMMARY_INPUT_CHARS", "4000"))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SUMMARY_API_KEY = ""

"""
Application configuration classes.

Values come from the environment (a local .env file is loaded first when
present).  Select a class with create_app("development" | "testing" |
"production").
"""
import os

from dotenv import load_dotenv

load_dotenv()

_BASE_DIR = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-only-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(_BASE_DIR, "instance", "faceoff.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Feed
    FEED_PAGE_SIZE = int(os.environ.get("FEED_PAGE_SIZE", 15))

    # Flask-Limiter
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = "300 per hour"

    # Flask-Talisman (HTTPS headers) – only switched on in production
    TALISMAN_ENABLED = False
    TALISMAN_CONFIG: dict = {}

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    FEED_PAGE_SIZE = 5


class ProductionConfig(Config):
    TALISMAN_ENABLED = True
    TALISMAN_CONFIG = {
        "force_https": True,
        "content_security_policy": None,
    }
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


config = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
    "default":     DevelopmentConfig,
}

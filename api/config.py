"""
Environment-aware configuration.
Values come from the process environment (and .env, via python-dotenv);
the class is selected by APP_ENV (dev / testing / prod).
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_days(name: str, default: str) -> timedelta:
    return timedelta(days=int(os.getenv(name, default)))


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DOCUMENTATION_URL = os.getenv("DOCUMENTATION_URL", "/apidocs/")

    # Tokens: access and refresh tokens MUST use different secrets
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret-change-me")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "gastronomy-api")
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRES_MINUTES", "30")))
    REFRESH_TOKEN_EXPIRES = _env_days("REFRESH_TOKEN_EXPIRES_DAYS", "14")

    # Refresh token store
    MAX_REFRESH_TOKENS = int(os.getenv("MAX_REFRESH_TOKENS", "6"))
    # Expired tokens are kept this long before the cleanup job deletes them
    REFRESH_TOKEN_RETENTION = _env_days("REFRESH_TOKEN_RETENTION_DAYS", "14")
    COOKIE_MAX_AGE = REFRESH_TOKEN_EXPIRES
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", "false")

    # Rate limiting
    RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "59"))
    RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "15"))
    # limits storage URI, e.g. memory:// or redis://localhost:6379
    RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

    # Maintenance
    SESSION_CLEANUP_ENABLED = _env_bool("SESSION_CLEANUP_ENABLED", "true")
    SESSION_CLEANUP_INTERVAL = int(os.getenv("SESSION_CLEANUP_INTERVAL", str(24 * 60 * 60)))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    RATE_LIMIT_REQUESTS = 15
    SESSION_CLEANUP_ENABLED = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", "true")
    RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "50"))


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/testing/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig

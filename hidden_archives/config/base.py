import os


class ConfigurationError(Exception):
    """
    Raised when an invalid or unsupported configuration is requested.
    """
    pass


def _env_list(name):
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


class BaseConfig:
    """
    Base configuration shared by all environments.
    """

    # Flask
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    ENVIRONMENT = "base"

    # Security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///hidden_archives.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT (admin actors)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_COOKIE_CSRF_PROTECT = False  # state changes carry their own scoped tokens
    JWT_ERROR_MESSAGE_KEY = "error"

    # Hidden archives
    HPC_REDIRECT_POLICY = os.getenv("HPC_REDIRECT_POLICY", "always_fallback")
    HPC_SHOP_PAGE_PATH = os.getenv("HPC_SHOP_PAGE_PATH", "/shop/")
    HPC_NONCE_LIFETIME = int(os.getenv("HPC_NONCE_LIFETIME", "86400"))
    ALLOWED_REDIRECT_HOSTS = _env_list("ALLOWED_REDIRECT_HOSTS")

    # Logging / monitoring
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_REQUESTS = False
    SENTRY_DSN = os.getenv("SENTRY_DSN")

    # Application
    APP_NAME = "Hidden Category Archives"
    APP_VERSION = "1.2.0"

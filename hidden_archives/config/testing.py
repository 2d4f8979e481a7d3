from .base import BaseConfig


class TestingConfig(BaseConfig):
    """
    Test configuration: in-memory database, fixed keys.
    """

    TESTING = True
    ENVIRONMENT = "testing"

    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    HPC_REDIRECT_POLICY = "always_fallback"
    HPC_SHOP_PAGE_PATH = "/shop/"
    HPC_NONCE_LIFETIME = 86400
    ALLOWED_REDIRECT_HOSTS = []
    SENTRY_DSN = None

import os

from .base import ConfigurationError
from .development import DevelopmentConfig
from .production import ProductionConfig
from .testing import TestingConfig


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name=None):
    """
    Resolve and return the correct configuration class.

    ``name`` wins over the APP_ENV environment variable.

    Supported values:
    - development
    - production
    - testing
    """

    env = (name or os.getenv("APP_ENV", "development")).lower()

    try:
        return CONFIGS[env]
    except KeyError:
        raise ConfigurationError(f"Invalid APP_ENV value: {env}") from None


__all__ = ["ConfigurationError", "get_config", "CONFIGS"]

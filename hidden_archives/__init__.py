"""
Flask application factory for the hidden category archives storefront.
"""

import logging
from typing import Optional

import sentry_sdk
from flask import Flask, g, request
from sentry_sdk.integrations.flask import FlaskIntegration

from hidden_archives.config import ConfigurationError, get_config
from hidden_archives.context import RequestContext
from hidden_archives.errors import register_error_handlers
from hidden_archives.extensions import db, init_extensions
from hidden_archives.hooks import HookRegistry
from hidden_archives.logging_config import setup_logging
from hidden_archives.middleware.request_id import init_request_id_middleware
from hidden_archives.middleware.security_headers import init_security_headers
from hidden_archives.security.nonces import NonceManager

logger = logging.getLogger(__name__)


def setup_sentry(app: Flask) -> None:
    """Initialize Sentry error tracking"""
    sentry_dsn = app.config.get("SENTRY_DSN")

    if sentry_dsn and app.config.get("ENVIRONMENT") == "production":
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment="production",
            release=app.config.get("APP_VERSION"),
            send_default_pii=False,
        )
        logger.info("Sentry error tracking initialized")


def validate_config(app: Flask) -> None:
    if not app.config.get("SECRET_KEY"):
        raise ConfigurationError("SECRET_KEY is required")
    if app.config.get("ENVIRONMENT") == "production" and len(app.config["SECRET_KEY"]) < 32:
        raise ConfigurationError("SECRET_KEY must be at least 32 characters in production")


def setup_request_hooks(app: Flask) -> None:
    """Run template_redirect handlers before any view renders."""

    @app.before_request
    def template_redirect():
        ctx = RequestContext.from_request(request)
        g.request_context = ctx
        if request.endpoint == "static":
            return None
        return app.extensions["hooks"].dispatch_until("template_redirect", ctx)


def register_routes(app: Flask) -> None:
    from hidden_archives.routes import admin_bp, storefront_bp

    app.register_blueprint(storefront_bp)
    app.register_blueprint(admin_bp)


def register_cli(app: Flask) -> None:
    from hidden_archives.cli import hpc_cli

    app.cli.add_command(hpc_cli)


def create_app(config_name: Optional[str] = None, overrides: Optional[dict] = None) -> Flask:
    """
    Application factory.

    Args:
        config_name: Configuration name (development, production, testing)
        overrides: Extra config values applied after the config class

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    # Request ids first so every later hook can log with one
    init_request_id_middleware(app)
    setup_logging(app)
    validate_config(app)
    setup_sentry(app)
    logger.info(f"Starting application in {app.config.get('ENVIRONMENT')} mode")

    init_extensions(app)

    hooks = HookRegistry()
    nonces = NonceManager(app.config["SECRET_KEY"], lifetime=app.config.get("HPC_NONCE_LIFETIME", 86400))
    app.extensions["hooks"] = hooks
    app.extensions["nonces"] = nonces

    setup_request_hooks(app)
    init_security_headers(app)
    register_error_handlers(app)
    register_routes(app)
    register_cli(app)

    from hidden_archives import plugin

    plugin.init_app(app, hooks, nonces)

    logger.info(f"Registered hooks: {', '.join(hooks.names())}")
    return app


__all__ = ["create_app", "db"]

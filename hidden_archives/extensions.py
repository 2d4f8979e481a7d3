# hidden_archives/extensions.py
"""
Flask extensions initialization module.
Handles initialization and configuration of the database and JWT extensions.
"""

import logging

from flask import jsonify
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()

logger = logging.getLogger(__name__)


def init_extensions(app):
    """Initialize all Flask extensions."""

    try:
        db.init_app(app)
        logger.info("SQLAlchemy initialized")

        configure_jwt(app)
        jwt.init_app(app)
        setup_jwt_callbacks()
        logger.info("JWT Manager initialized")

        # Create tables only in development or if configured
        if app.config.get("ENVIRONMENT") == "development" or app.config.get("CREATE_TABLES_ON_START", False):
            create_tables(app)

        logger.info("All extensions initialized successfully")

    except Exception as e:
        logger.error(f"Failed to initialize extensions: {e}")
        raise

    return app


def configure_jwt(app):
    """Fill in JWT settings that depend on other configuration."""
    if not app.config.get("JWT_SECRET_KEY"):
        app.config["JWT_SECRET_KEY"] = app.config.get("SECRET_KEY")
    app.config.setdefault("JWT_ALGORITHM", "HS256")
    app.config.setdefault("JWT_IDENTITY_CLAIM", "sub")


def setup_jwt_callbacks():
    """Setup JWT callbacks for token validation and error handling."""

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            "error": "token_expired",
            "message": "The token has expired.",
            "status_code": 401,
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            "error": "invalid_token",
            "message": "Invalid token. Please provide a valid authentication token.",
            "status_code": 401,
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            "error": "authorization_required",
            "message": "Authentication required. Please provide a valid token.",
            "status_code": 401,
        }), 401

    logger.debug("JWT callbacks configured")


def create_tables(app):
    """Create database tables."""
    try:
        with app.app_context():
            # Models must be imported so their tables are registered
            from hidden_archives import models  # noqa: F401

            db.create_all()
            logger.info("Database tables created/verified")

    except Exception as e:
        logger.error(f"Failed to create tables: {e}", exc_info=True)
        if app.config.get("ENVIRONMENT") == "production":
            raise


__all__ = ["db", "jwt", "init_extensions", "create_tables"]

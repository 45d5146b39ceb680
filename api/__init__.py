from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage
from models.credential_store import SQLCredentialStore
from utils import media
from utils.sessions import EXTENSION_KEY, build_session_manager

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "VideoTube API",
        "version": "1.0.0",
        "description": "REST API for users, videos, comments, likes, subscriptions and channel dashboards.",
    },
    "basePath": "/",  # Blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\". "
                           "Browser clients can rely on the accessToken cookie instead."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, config_overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Opens the database (models.storage), wires the session manager onto
    app.extensions and configures the Cloudinary client. `config_overrides`
    is applied on top of the selected config class (used by tests).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    # Cookies carry the tokens, so CORS must allow credentials
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage.connect(app.config["DATABASE_URL"], echo=app.config.get("DATABASE_ECHO", False))
    storage.reload()
    app.extensions[EXTENSION_KEY] = build_session_manager(app.config, SQLCredentialStore(storage))

    media.configure(
        app.config.get("CLOUDINARY_CLOUD_NAME"),
        app.config.get("CLOUDINARY_API_KEY"),
        app.config.get("CLOUDINARY_API_SECRET"),
    )

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .dashboard import bp as dashboard_bp
    from .comments import bp as comments_bp
    from .likes import bp as likes_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/users")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(dashboard_bp, url_prefix="/api/v1/dashboard")
    app.register_blueprint(comments_bp, url_prefix="/api/v1/comments")
    app.register_blueprint(likes_bp, url_prefix="/api/v1/likes")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to VideoTube API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app

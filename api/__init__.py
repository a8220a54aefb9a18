from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.user import User
from models.member import Member
from models.refresh_token import UserRefreshToken, MemberRefreshToken
from utils.maintenance import SessionCleanupJob
from utils.rate_limiter import RateLimiter
from utils.security import TokenCodec
from utils.token_store import RefreshTokenStore

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Gastronomy API",
        "version": "1.0.0",
        "description": "REST API for cocktails, meals, ingredients and reviews.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
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

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    app.logger.setLevel(level)


def init_sessions(app: Flask) -> None:
    """
    Build the session services from config and keep them on the app:
    - extensions["token_codec"]   TokenCodec
    - extensions["token_stores"]  {"user": ..., "member": ...}
    - extensions["session_cleanup"] SessionCleanupJob
    """
    codec = TokenCodec.from_config(app.config)
    store_options = {
        "max_tokens": app.config["MAX_REFRESH_TOKENS"],
        "default_ttl": app.config["REFRESH_TOKEN_EXPIRES"],
        "retention": app.config["REFRESH_TOKEN_RETENTION"],
    }
    stores = {
        "user": RefreshTokenStore(codec, UserRefreshToken, User, **store_options),
        "member": RefreshTokenStore(codec, MemberRefreshToken, Member, **store_options),
    }
    app.extensions["token_codec"] = codec
    app.extensions["token_stores"] = stores

    job = SessionCleanupJob(stores.values(), interval=app.config["SESSION_CLEANUP_INTERVAL"])
    app.extensions["session_cleanup"] = job
    if app.config.get("SESSION_CLEANUP_ENABLED") and not app.testing:
        job.start()


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Each call builds its own codec, token stores and rate limiter, so tests
    get an isolated app per test.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    configure_logging(app)

    # Credentials (refresh cookie) must be allowed cross-origin
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}}, supports_credentials=True)

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Rate limiting runs before everything else
    RateLimiter(
        limit=app.config["RATE_LIMIT_REQUESTS"],
        window=app.config["RATE_LIMIT_WINDOW"],
        storage_uri=app.config["RATE_LIMIT_STORAGE_URI"],
    ).init_app(app)

    init_sessions(app)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .users import bp as users_bp
    from .members import bp as members_bp
    from .ingredients import bp as ingredients_bp
    from .cocktails import bp as cocktails_bp
    from .meals import bp as meals_bp
    from .cli import register_commands

    app.register_blueprint(health_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(ingredients_bp)
    app.register_blueprint(cocktails_bp)
    app.register_blueprint(meals_bp)
    register_commands(app)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    return app

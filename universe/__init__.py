import logging

from flask import Flask

from .config import settings
from .database import build_engine, build_session_factory, close_db_session
from .errors import register_error_handlers
from .extensions import limiter
from .logging_config import configure_logging
from .middleware import SecurityHeadersMiddleware


def create_app(test_config=None):
    app = Flask(__name__)

    # Load configuration from settings
    app.config.from_mapping(
        DATABASE_URL=settings.DATABASE_URL,
        JWT_SECRET=settings.JWT_SECRET,
        JWT_ALGORITHM=settings.JWT_ALGORITHM,
        JWT_EXPIRE_DAYS=settings.JWT_EXPIRE_DAYS,
        BCRYPT_ROUNDS=settings.BCRYPT_ROUNDS,
        DEBUG=settings.DEBUG,
        CORS_ORIGINS=settings.CORS_ORIGINS,
        AUTH_RATE_LIMIT=settings.AUTH_RATE_LIMIT,
        RATELIMIT_STORAGE_URI=settings.RATELIMIT_STORAGE_URI,
        MAX_CONTENT_LENGTH=settings.MAX_CONTENT_LENGTH,
        MAX_UPLOAD_BYTES=settings.MAX_UPLOAD_BYTES,
        POST_CREATION_ROLES=settings.POST_CREATION_ROLES,
        LOG_LEVEL=settings.LOG_LEVEL,
    )

    if test_config:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"])
    logger = logging.getLogger(__name__)

    if not app.config.get("JWT_SECRET"):
        # Token issuance fails with a 500 until this is set
        logger.critical("JWT_SECRET is not set; login and registration will fail")

    # Configure SQLAlchemy engine/session
    engine = build_engine(app.config["DATABASE_URL"], echo=bool(app.config.get("SQL_ECHO")))
    SessionLocal = build_session_factory(engine)

    # attach to app for other modules to use
    app.extensions["db_engine"] = engine
    app.extensions["db_session_factory"] = SessionLocal
    app.teardown_appcontext(close_db_session)

    # Token signing configuration is injected once per app so tests can swap it
    from .auth.tokens import JWTManager, TokenSettings

    app.extensions["jwt_manager"] = JWTManager(TokenSettings.from_config(app.config))

    limiter.init_app(app)
    SecurityHeadersMiddleware(app)
    register_error_handlers(app)

    # register blueprints
    from .auth.routes import bp as auth_bp
    from .routes import events_bp, health_bp, posts_bp, upload_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(upload_bp)

    # helper to create DB tables based on SQLAlchemy models
    def init_db():
        try:
            from .models import Base

            Base.metadata.create_all(bind=engine)
        except Exception as e:
            logger.exception("init_db failed: %s", e)
            # re-raise so callers (tests) can handle or log as needed
            raise

    app.init_db = init_db

    return app

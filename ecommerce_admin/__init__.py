# ecommerce_admin/__init__.py
import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask, g
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_talisman import Talisman
from werkzeug.exceptions import HTTPException

from .config import get_config_by_name
from .constants import StatusCode
from .exceptions import ApiError
from .i18n import get_locale
from .models import db
from .responses import ApiResponse

# Initialize extensions without app object yet
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
talisman = Talisman()

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'

HTTP_STATUS_CODES = {
    400: StatusCode.BAD_REQUEST,
    401: StatusCode.UNAUTHORIZED,
    403: StatusCode.FORBIDDEN,
    404: StatusCode.NOT_FOUND,
    405: StatusCode.METHOD_NOT_ALLOWED,
    422: StatusCode.VALIDATION_ERROR,
    429: StatusCode.TOO_MANY_REQUESTS,
}


class AdminFlask(Flask):
    """Flask application that lets views and error handlers return an ApiResponse."""

    def make_response(self, rv):
        if isinstance(rv, ApiResponse):
            return rv.to_response()
        return super().make_response(rv)


def configure_logging(app):
    log_level_str = app.config.get('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    if app.testing:
        app.logger.setLevel(log_level)
        return

    log_file = app.config.get('LOG_FILE')
    if log_file and not app.debug:
        handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024 * 100, backupCount=20)
    else:
        handler = logging.StreamHandler()
        if app.debug:
            log_level = logging.DEBUG
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(log_level)
    if not app.logger.handlers:
        app.logger.addHandler(handler)
    app.logger.setLevel(log_level)


def register_jwt_callbacks(app):
    from .auth.session_manager import is_token_revoked, load_token_user

    @jwt.user_lookup_loader
    def user_lookup_callback(_jwt_header, jwt_data):
        return load_token_user(jwt_data.get('sub'))

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(_jwt_header, jwt_payload):
        return is_token_revoked(jwt_payload.get('jti'))

    @jwt.unauthorized_loader
    def missing_token_callback(reason):
        return ApiResponse.unauthorized("Unauthenticated.")

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        app.logger.warning(f"Invalid token presented: {reason}")
        return ApiResponse.unauthorized("Invalid token.")

    @jwt.expired_token_loader
    def expired_token_callback(_jwt_header, _jwt_payload):
        return ApiResponse.unauthorized("Token has expired.", status_code=StatusCode.TOKEN_EXPIRED)

    @jwt.revoked_token_loader
    def revoked_token_callback(_jwt_header, _jwt_payload):
        return ApiResponse.unauthorized("Token has been revoked.", status_code=StatusCode.TOKEN_REVOKED)

    @jwt.user_lookup_error_loader
    def user_lookup_error_callback(_jwt_header, _jwt_payload):
        return ApiResponse.unauthorized("Unauthenticated.")


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def api_error(error):
        if error.http_status >= 500:
            app.logger.error(f"API error: {error.message}", exc_info=True)
        return error.to_api_response()

    @app.errorhandler(HTTPException)
    def http_error(error):
        status_code = HTTP_STATUS_CODES.get(error.code, StatusCode.SERVER_ERROR if error.code >= 500 else StatusCode.BAD_REQUEST)
        if error.code == 429:
            app.logger.warning(f"Rate limit exceeded: {error.description}")
            message = "Too many requests. Please try again later."
        else:
            message = error.description or error.name
        return ApiResponse.error(message, http_status=error.code, status_code=status_code)

    @app.errorhandler(Exception)
    def internal_server_error(error):
        db.session.rollback()
        app.logger.error(f"Internal Server Error: {error}", exc_info=True)
        return ApiResponse.server_error("An internal server error occurred. Please try again later.")


def create_app(config_name=None):
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    app_config = get_config_by_name(config_name)

    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    app = AdminFlask(__name__, instance_path=os.path.join(project_root, 'instance'))
    app.config.from_object(app_config)
    app.json.sort_keys = False

    configure_logging(app)
    app.logger.info(f"E-commerce admin API starting with config: {config_name}")

    # Initialize extensions with app object
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    talisman.init_app(
        app,
        content_security_policy=app.config.get('CONTENT_SECURITY_POLICY'),
        force_https=app.config.get('TALISMAN_FORCE_HTTPS', False),
        strict_transport_security=app.config.get('TALISMAN_FORCE_HTTPS', False),
        frame_options='DENY',
        referrer_policy='strict-origin-when-cross-origin',
    )
    CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*").split(',')}})

    from .audit_log_service import AuditLogService
    from .auth.permission_cache import PermissionCache
    app.audit_log_service = AuditLogService(app=app)
    app.permission_cache = PermissionCache(ttl=app.config.get('PERMISSION_CACHE_TTL', 300))

    register_jwt_callbacks(app)
    register_error_handlers(app)

    # Register Blueprints
    from .auth import auth_bp
    app.register_blueprint(auth_bp)

    from .admin_api import admin_api_bp
    app.register_blueprint(admin_api_bp)
    limiter.limit(app.config.get('ADMIN_API_RATELIMITS', "600 per hour"))(admin_api_bp)

    from .database import init_db_command, seed_db_command
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_db_command)

    @app.before_request
    def set_request_locale():
        g.locale = get_locale()

    @app.route('/api')
    def api_root():
        return ApiResponse.ok({"name": "E-commerce Admin API", "version": app.config.get("API_VERSION", "v1")},
                              "Welcome to the E-commerce Admin API")

    return app

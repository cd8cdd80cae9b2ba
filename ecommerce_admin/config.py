# ecommerce_admin/config.py
import os
from datetime import timedelta
from dotenv import load_dotenv

# Determine the base directory of this config file (ecommerce_admin/)
# and the project root (one level up)
CONFIG_FILE_DIR = os.path.abspath(os.path.dirname(__file__))
PROJECT_ROOT = os.path.dirname(CONFIG_FILE_DIR)

dotenv_path = os.path.join(PROJECT_ROOT, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)

DEFAULT_SECRET_KEY = 'change_this_default_secret_key_in_prod'
DEFAULT_JWT_SECRET_KEY = 'change_this_default_jwt_secret_key_in_prod'


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY', DEFAULT_SECRET_KEY)
    DEBUG = False
    TESTING = False
    API_VERSION = "v1"

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(PROJECT_ROOT, 'instance', 'ecommerce_admin.sqlite3')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Bearer tokens only; the admin SPA stores the token itself
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', DEFAULT_JWT_SECRET_KEY)
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_TYPE = 'Bearer'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get('JWT_ACCESS_TOKEN_HOURS', 12)))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    LOG_FILE = os.environ.get('LOG_FILE', None)

    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', "http://localhost:5173,http://127.0.0.1:5173")

    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', "memory://")
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_HEADERS_ENABLED = True
    LOGIN_RATELIMITS = "10 per minute"
    ADMIN_API_RATELIMITS = "600 per hour"

    TALISMAN_FORCE_HTTPS = False
    CONTENT_SECURITY_POLICY = {
        'default-src': ['\'self\''],
        'frame-ancestors': ['\'none\'']
    }

    # List endpoints clamp per_page into [PER_PAGE_MIN, PER_PAGE_MAX]
    PER_PAGE_DEFAULT = 10
    PER_PAGE_MIN = 5
    PER_PAGE_MAX = 100

    DEFAULT_LOCALE = 'en'
    SUPPORTED_LOCALES = ['en', 'fr']

    PERMISSION_CACHE_TTL = int(os.environ.get('PERMISSION_CACHE_TTL', 300))

    INITIAL_ADMIN_USERNAME = os.environ.get('INITIAL_ADMIN_USERNAME', 'admin')
    INITIAL_ADMIN_EMAIL = os.environ.get('INITIAL_ADMIN_EMAIL')
    INITIAL_ADMIN_PASSWORD = os.environ.get('INITIAL_ADMIN_PASSWORD')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = 'DEBUG'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        'sqlite:///' + os.path.join(PROJECT_ROOT, 'instance', 'dev_ecommerce_admin.sqlite3')


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL', 'sqlite:///:memory:')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    RATELIMIT_ENABLED = False
    PERMISSION_CACHE_TTL = 60
    INITIAL_ADMIN_EMAIL = 'test_admin@example.com'
    INITIAL_ADMIN_PASSWORD = 'test_password123'


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False
    TALISMAN_FORCE_HTTPS = True

    PROD_CORS_ORIGINS = os.environ.get('PROD_CORS_ORIGINS')
    if PROD_CORS_ORIGINS:
        CORS_ORIGINS = PROD_CORS_ORIGINS

    MYSQL_USER_PROD = os.environ.get('MYSQL_USER_PROD')
    MYSQL_PASSWORD_PROD = os.environ.get('MYSQL_PASSWORD_PROD')
    MYSQL_HOST_PROD = os.environ.get('MYSQL_HOST_PROD')
    MYSQL_DB_PROD = os.environ.get('MYSQL_DB_PROD')
    if all([MYSQL_USER_PROD, MYSQL_PASSWORD_PROD, MYSQL_HOST_PROD, MYSQL_DB_PROD]):
        SQLALCHEMY_DATABASE_URI = f"mysql+pymysql://{MYSQL_USER_PROD}:{MYSQL_PASSWORD_PROD}@{MYSQL_HOST_PROD}/{MYSQL_DB_PROD}"

    RATELIMIT_STORAGE_URI = os.environ.get('PROD_RATELIMIT_STORAGE_URI', Config.RATELIMIT_STORAGE_URI)


config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig,
    default=DevelopmentConfig
)


def validate_production_config(config_instance):
    if config_instance.SECRET_KEY == DEFAULT_SECRET_KEY:
        raise ValueError("Production SECRET_KEY is not set or is using the default value.")
    if config_instance.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
        raise ValueError("Production JWT_SECRET_KEY is not set or is using the default value.")
    if not config_instance.PROD_CORS_ORIGINS:
        raise ValueError("PROD_CORS_ORIGINS environment variable must be set for production.")


def get_config_by_name(config_name_str=None):
    """
    Retrieves a configuration instance by name.
    Creates the SQLite and log directories and validates production secrets.
    """
    if config_name_str is None:
        config_name_str = os.getenv('FLASK_ENV', 'default')

    SelectedConfigClass = config_by_name.get(config_name_str.lower())
    if not SelectedConfigClass:
        SelectedConfigClass = config_by_name['default']

    config_instance = SelectedConfigClass()

    db_uri = config_instance.SQLALCHEMY_DATABASE_URI
    paths_to_create = [
        os.path.dirname(db_uri.replace('sqlite:///', ''))
            if db_uri.startswith('sqlite:///') and not db_uri.endswith(':memory:')
            else None,
        os.path.dirname(config_instance.LOG_FILE) if config_instance.LOG_FILE else None
    ]
    for path in paths_to_create:
        if path:
            os.makedirs(path, exist_ok=True)

    if isinstance(config_instance, ProductionConfig):
        validate_production_config(config_instance)

    return config_instance

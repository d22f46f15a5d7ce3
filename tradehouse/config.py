import os
from dotenv import load_dotenv

load_dotenv()


def _split(value):
    return [item.strip() for item in (value or '').split(',') if item.strip()]


def _admin_emails():
    """Admin notification recipients, deduplicated in order."""
    listed = _split(os.environ.get('ADMIN_EMAILS'))
    if not listed:
        listed = [
            os.environ.get('ADMIN_EMAIL_1'),
            os.environ.get('ADMIN_EMAIL_2'),
            os.environ.get('ADMIN_EMAIL_3'),
            os.environ.get('MAIL_USERNAME'),
        ]
    seen = []
    for address in listed:
        if address and address.lower() not in [s.lower() for s in seen]:
            seen.append(address)
    return seen


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'TradeHouse International')

    # Database - Using SQLite for easy local development
    basedir = os.path.dirname(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{os.path.join(basedir, "instance", "tradehouse.db")}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Authentication
    AUTH_PROVIDER = os.environ.get('AUTH_PROVIDER', 'static')  # static, stored
    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', 24))
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')
    IDENTITY_CACHE_TTL = 5 * 60
    IDENTITY_CACHE_SIZE = 256

    # Image hosting
    IMAGE_STORE = os.environ.get('IMAGE_STORE', 'local')  # local, s3
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'uploads')
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB request body
    MAX_IMAGE_SIZE = 5 * 1024 * 1024
    ALLOWED_EXTENSIONS = ['png', 'jpg', 'jpeg', 'gif', 'webp']
    IMAGE_UPLOAD_TIMEOUT = 10
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    S3_BUCKET = os.environ.get('S3_BUCKET')
    S3_PUBLIC_URL = os.environ.get('S3_PUBLIC_URL')

    # Mail Configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_USERNAME')
    ADMIN_EMAILS = _admin_emails()
    EMAIL_SEND_TIMEOUT = 20

    # Contact form
    CONTACT_DUPLICATE_WINDOW_MINUTES = 5

    # Pagination
    ITEMS_PER_PAGE = 12
    MAX_ITEMS_PER_PAGE = 50

    # Rate limits
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    CONTACT_RATE_LIMIT = '10 per 15 minutes'
    LOGIN_RATE_LIMIT = '10 per 15 minutes'
    VERIFY_RATE_LIMIT = '50 per 15 minutes'
    FEEDBACK_RATE_LIMIT = '10 per minute'
    UPLOAD_RATE_LIMIT = '10 per 15 minutes'
    ADMIN_RATE_LIMIT = '100 per 15 minutes'

    # CORS
    CORS_ORIGINS = ['http://localhost:3000', 'http://localhost:3001']

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    TRUST_PROXY = False
    INCLUDE_STACK_TRACES = True


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    IMAGE_STORE = os.environ.get('IMAGE_STORE', 's3')
    CORS_ORIGINS = _split(os.environ.get('ALLOWED_ORIGINS'))
    TRUST_PROXY = True
    INCLUDE_STACK_TRACES = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET = 'test-secret'
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'admin123'
    AUTH_PROVIDER = 'static'
    IMAGE_STORE = 'local'
    MAIL_DEFAULT_SENDER = 'noreply@tradehouse.test'
    MAIL_USERNAME = 'noreply@tradehouse.test'
    ADMIN_EMAILS = ['sales@tradehouse.test', 'ops@tradehouse.test']
    RATELIMIT_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

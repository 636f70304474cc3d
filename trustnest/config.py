"""
Configuration for the TrustNest backend
"""
import os
from datetime import timedelta


def _database_url():
    return os.environ.get(
        'DATABASE_URL',
        'postgresql://localhost/trustnest'
    ).replace('postgres://', 'postgresql://')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY')
    PRODUCTION = bool(os.environ.get('PRODUCTION'))
    TESTING = False

    # Database configuration
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 20,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'max_overflow': 40,
        'pool_timeout': 30
    }

    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    CACHE_TTL_SECONDS = int(os.environ.get('CACHE_TTL_SECONDS', 300))

    # Document storage
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    STORAGE_BASE_URL = os.environ.get('STORAGE_BASE_URL', '/files')
    DOCUMENT_ENCRYPTION_KEY = os.environ.get('DOCUMENT_ENCRYPTION_KEY')
    DOCUMENT_ENCRYPTION_KEY_ID = os.environ.get('DOCUMENT_ENCRYPTION_KEY_ID', 'default')
    # Largest per-type limit is 15MB, leave room for multipart overhead
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRATION_HOURS = int(os.environ.get('JWT_EXPIRATION_HOURS', 24))

    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_DEFAULT = "5000 per day;500 per hour"

    ALLOWED_ORIGINS = [
        origin.strip() for origin in os.environ.get(
            'ALLOWED_ORIGINS',
            'https://trustnest.eu,http://localhost:5000,http://127.0.0.1:5000'
        ).split(',') if origin.strip()
    ]

    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@trustnest.eu')

    CELERY_BEAT_SCHEDULE = {
        'lift-expired-suspensions': {
            'task': 'trustnest.celery_app.lift_expired_suspensions',
            'schedule': timedelta(hours=1),
        },
    }


class TestingConfig(Config):
    TESTING = True
    PRODUCTION = False
    SECRET_KEY = 'test-secret-key-with-at-least-32-bytes!'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    # Fixed key so encrypted fixtures stay readable across the test run
    DOCUMENT_ENCRYPTION_KEY = 'pKkcaXn2Ydm5Wq3mHq0n8Qh1T0s8h8aV3uQ8m3uJk5E='
    RATELIMIT_ENABLED = False

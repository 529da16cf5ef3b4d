"""Configuration management using environment variables.

This module provides centralized configuration management using python-decouple
to read from .env files and environment variables.
"""

from decouple import config
from typing import List


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Base configuration class."""

    # Database
    DATABASE_URL: str = config('DATABASE_URL', default='sqlite:///universe.db')

    # Token signing. No default: a missing secret is a deployment error.
    JWT_SECRET: str = config('JWT_SECRET', default='')
    JWT_ALGORITHM: str = config('JWT_ALGORITHM', default='HS256')
    JWT_EXPIRE_DAYS: int = config('JWT_EXPIRE_DAYS', default=7, cast=int)
    BCRYPT_ROUNDS: int = config('BCRYPT_ROUNDS', default=12, cast=int)

    # Environment
    DEBUG: bool = config('DEBUG', default=False, cast=bool)
    ENVIRONMENT: str = config('ENVIRONMENT', default='development')

    # Security
    CORS_ORIGINS: List[str] = config('CORS_ORIGINS', default='*', cast=_csv)
    AUTH_RATE_LIMIT: str = config('AUTH_RATE_LIMIT', default='10 per minute')
    RATELIMIT_STORAGE_URI: str = config('RATELIMIT_STORAGE_URI', default='memory://')

    # Request bodies carry base64 images
    MAX_CONTENT_LENGTH: int = config('MAX_CONTENT_LENGTH', default=10 * 1024 * 1024, cast=int)
    MAX_UPLOAD_BYTES: int = config('MAX_UPLOAD_BYTES', default=5 * 1024 * 1024, cast=int)

    # Roles allowed to create posts (comma separated role names)
    POST_CREATION_ROLES: List[str] = config('POST_CREATION_ROLES', default='STUDENT', cast=_csv)

    # Logging
    LOG_LEVEL: str = config('LOG_LEVEL', default='INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_LEVEL = 'WARNING'


class TestingConfig(Config):
    """Testing configuration."""
    DATABASE_URL = 'sqlite://'
    DEBUG = True
    BCRYPT_ROUNDS = 4


def get_config() -> Config:
    """Get configuration based on environment."""
    env = config('ENVIRONMENT', default='development')

    if env == 'production':
        return ProductionConfig()
    elif env == 'testing':
        return TestingConfig()
    else:
        return DevelopmentConfig()


# Global config instance
settings = get_config()

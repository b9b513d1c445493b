"""
Testing configuration for the Haulbase backend
"""
import os
from config.settings import Config


class TestingConfig(Config):
    """Testing configuration with isolated database and safe defaults"""

    TESTING = True
    DEBUG = False

    # Use in-memory SQLite for fast tests
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///:memory:'
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # SQLite has no statement_timeout
    STATEMENT_TIMEOUT_MS = 0

    JWT_SECRET_KEY = 'test-jwt-secret-key-for-the-haulbase-suite'

    # Small pages make pagination easy to exercise
    ITEMS_PER_PAGE = 10
    MAX_ITEMS_PER_PAGE = 50

    # Logging
    LOG_LEVEL = 'WARNING'

    # CORS - allow local frontends in tests
    CORS_ORIGINS = ['http://localhost:5173', 'http://localhost:3000']

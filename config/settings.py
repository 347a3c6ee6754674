# config/settings.py
"""
Configuration Management for the SecOps Task Tracker

Handles database location, token signing, logging and scheduler settings.
Every value can be overridden through environment variables.
"""

import os


class Settings(object):
    """
    Application settings with safe defaults.
    Can be overridden via environment variables.
    """

    # =====================================================
    # DATABASE CONFIGURATION
    # =====================================================

    SQLITE_DB_PATH = os.getenv('SQLITE_DB_PATH', 'task_tracker.db')

    # =====================================================
    # AUTHENTICATION
    # =====================================================

    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'change-me-task-tracker-secret')
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', str(7 * 24 * 60)))
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '10'))

    # Seeded on startup when the users table is empty and both are set
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', '')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', '')

    # =====================================================
    # HTTP
    # =====================================================

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:5173')

    # =====================================================
    # LOGGING
    # =====================================================

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')

    # =====================================================
    # CHATBOT
    # =====================================================

    # Rows returned with a chatbot answer; the full count is reported separately
    CHATBOT_MAX_TASKS = int(os.getenv('CHATBOT_MAX_TASKS', '50'))
    TOP_N_DEFAULT = int(os.getenv('TOP_N_DEFAULT', '5'))

    # =====================================================
    # REMINDERS
    # =====================================================

    TIMEZONE = os.getenv('TIMEZONE', 'Asia/Riyadh')
    REMINDER_SCHEDULER_ENABLED = os.getenv('REMINDER_SCHEDULER_ENABLED', 'true').lower() == 'true'
    REMINDER_HOUR = int(os.getenv('REMINDER_HOUR', '9'))

    # =====================================================
    # CLASS METHODS
    # =====================================================

    @classmethod
    def get_sqlite_path(cls):
        """Return path to SQLite database"""
        return cls.SQLITE_DB_PATH

    @classmethod
    def get_cors_origins(cls):
        """Return the allowed CORS origins as a list"""
        return [o.strip() for o in cls.CORS_ORIGINS.split(',') if o.strip()]


# Global settings instance
settings = Settings()

# password_policy/demo/config.py
"""Configuration for the demo application"""
import os
from datetime import timedelta

from password_policy.config import Config as PolicyDefaults


class Config(PolicyDefaults):
    """Base configuration with secure defaults"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()

    # Session configuration
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=30)

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///password_policy_demo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    MIN_PASSWORD_LENGTH = 8
    BCRYPT_ROUNDS = 12

    PASSWORD_POLICY_ENTITIES = {
        'password_policy.demo.models.User': {
            'password_field': 'password_hash',
            'password_history_field': 'password_history',
            'passwords_to_remember': 3,
            'expiry_days': 90,
            'reset_password_route_name': 'auth.change_password',
            'notified_routes': [
                'dashboard.index',
                'dashboard.profile',
                'auth.change_password',
                'auth.logout',
            ],
            'excluded_notified_routes': ['auth.change_password', 'auth.logout'],
            'detect_password_extensions': True,
            'extension_min_length': 4,
        },
    }

    PASSWORD_POLICY_EXPIRY_LISTENER = {
        'priority': 0,
        'redirect_on_expiry': True,
        'error_msg': {
            'text': {'title': 'password_policy.title', 'message': 'password_policy.message'},
            'type': 'warning',
        },
    }


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    PASSWORD_POLICY_LOG_LEVEL = 'debug'


class ProductionConfig(Config):
    """Production configuration with enhanced security"""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    PASSWORD_POLICY_ENABLE_CACHE = True


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    SECRET_KEY = 'testing-secret-key'

    # Use in-memory database for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # Faster hashing for tests
    BCRYPT_ROUNDS = 4


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

"""
Configuration settings for the Finance Forecasting Engine
"""

import os


class Config:
    """Base configuration"""
    # App
    APP_NAME = "Finance Forecasting Engine"
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///finance_forecasting.db'
    )
    # Fix for Heroku/Render PostgreSQL URLs
    if SQLALCHEMY_DATABASE_URI and SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Rate limiting
    RATELIMIT_DEFAULT = "100 per minute"
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL', 'memory://')

    # Forecasting
    FORECAST_LOOKBACK_DAYS = int(os.environ.get('FORECAST_LOOKBACK_DAYS', 365))
    CASH_FLOW_LOOKBACK_DAYS = int(os.environ.get('CASH_FLOW_LOOKBACK_DAYS', 90))
    FORECAST_DEFAULT_HORIZON_DAYS = int(os.environ.get('FORECAST_DEFAULT_HORIZON_DAYS', 90))
    CASH_FLOW_DEFAULT_HORIZON_DAYS = int(os.environ.get('CASH_FLOW_DEFAULT_HORIZON_DAYS', 30))
    MIN_HISTORY_DAYS = int(os.environ.get('MIN_HISTORY_DAYS', 30))


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///finance_forecasting_dev.db'
    )


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SECRET_KEY = os.environ.get('SECRET_KEY')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False


# Config mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get config based on environment"""
    env = os.environ.get('FLASK_ENV', 'development')
    config_class = config.get(env, config['default'])

    # Ensure secret key is set in production
    if config_class is ProductionConfig and not os.environ.get('SECRET_KEY'):
        raise ValueError("SECRET_KEY must be set in production")

    return config_class

import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///hotel_booking.db'
    JWT_EXPIRES_HOURS = int(os.environ.get('JWT_EXPIRES_HOURS', 24))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Business Rules Defaults
    HOTEL_TIMEZONE = os.environ.get('HOTEL_TIMEZONE', 'Asia/Ho_Chi_Minh')
    WEEK_START_DAY = int(os.environ.get('WEEK_START_DAY', 6))  # datetime.weekday(), 6 = Sunday
    DEFAULT_PAGE_SIZE = 10
    SWEEP_ON_CREATE = _env_bool('SWEEP_ON_CREATE', True)

    # ZaloPay gateway
    ZALOPAY_APP_ID = os.environ.get('ZALOPAY_APP_ID', '')
    ZALOPAY_KEY1 = os.environ.get('ZALOPAY_KEY1', '')
    ZALOPAY_KEY2 = os.environ.get('ZALOPAY_KEY2', '')
    ZALOPAY_ENDPOINT = os.environ.get('ZALOPAY_ENDPOINT', 'https://sb-openapi.zalopay.vn/v2/create')
    ZALOPAY_QUERY_ENDPOINT = os.environ.get('ZALOPAY_QUERY_ENDPOINT', 'https://sb-openapi.zalopay.vn/v2/query')
    ZALOPAY_CALLBACK_URL = os.environ.get('ZALOPAY_CALLBACK_URL', 'http://localhost:5000/api/payments/callback')
    ZALOPAY_REDIRECT_URL = os.environ.get('ZALOPAY_REDIRECT_URL', 'http://localhost:3001/MyBookings')
    ZALOPAY_TIMEOUT = float(os.environ.get('ZALOPAY_TIMEOUT', 10))
    ZALOPAY_RETRIES = int(os.environ.get('ZALOPAY_RETRIES', 1))

class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SWEEP_ON_CREATE = True
    HOTEL_TIMEZONE = 'UTC'
    ZALOPAY_APP_ID = '2553'
    ZALOPAY_KEY1 = 'test-key-one'
    ZALOPAY_KEY2 = 'test-key-two'
    ZALOPAY_ENDPOINT = 'https://gateway.test/v2/create'
    ZALOPAY_QUERY_ENDPOINT = 'https://gateway.test/v2/query'
    ZALOPAY_TIMEOUT = 1

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly

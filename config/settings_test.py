from .settings import *

SECRET_KEY = 'django-insecure-test-key'
DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

TIME_ZONE = 'Asia/Jakarta'
STUDIO_CURRENCY = 'IDR'
CURRENCY_DECIMAL_PLACES = 0
BOOKING_CODE_PREFIX = 'YJS'
PUBLIC_SLUG_LENGTH = 8

LOGGING['loggers']['bookings']['level'] = 'CRITICAL'
LOGGING['loggers']['payments']['level'] = 'CRITICAL'

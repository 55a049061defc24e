import os
import tempfile

from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

# File-backed so threaded tests get real per-thread connections
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'OPTIONS': {'timeout': 10},
        'TEST': {'NAME': os.path.join(tempfile.gettempdir(), 'marketplace_test.sqlite3')},
    }
}

ALLOWED_HOSTS = ['testserver']

RAZORPAY_KEY_ID = 'rzp_test_key'
RAZORPAY_KEY_SECRET = 'rzp-test-secret'
RAZORPAY_BASE_URL = 'https://api.razorpay.test/v1'
RAZORPAY_TIMEOUT = 5

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

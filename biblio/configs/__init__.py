#!/usr/bin/env python

"""
    Configurations for Biblio

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import os
from decimal import Decimal


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

# API server configuration
SCHEME = 'http'
HOST = os.environ.get('BIBLIO_HOST', 'localhost')
PORT = int(os.environ.get('BIBLIO_PORT', 8080))
WORKERS = int(os.environ.get('BIBLIO_WORKERS', 1))
DEBUG = bool(int(os.environ.get('BIBLIO_DEBUG', 0)))
LOG_LEVEL = os.environ.get('BIBLIO_LOG_LEVEL', 'info')
SSL_CRT = os.environ.get('BIBLIO_SSL_CRT')
SSL_KEY = os.environ.get('BIBLIO_SSL_KEY')
CORS_ORIGINS = [
    origin.strip() for origin in
    os.environ.get('BIBLIO_CORS_ORIGINS', 'http://localhost:3000').split(',')
    if origin.strip()
]

# Signs admin session cookies
SEED = os.environ.get('BIBLIO_SEED', 'dev-seed-change-in-production')

# Circulation policy
LOCK_RETRIES = int(os.environ.get('BIBLIO_LOCK_RETRIES', 3))
# Longest wait for a row or database lock, in milliseconds
LOCK_TIMEOUT = int(os.environ.get('BIBLIO_LOCK_TIMEOUT', 10000))
LOAN_DAYS = int(os.environ.get('BIBLIO_LOAN_DAYS', 14))
FINE_PER_DAY = Decimal(os.environ.get('BIBLIO_FINE_PER_DAY', '0'))
DEFAULT_LIMIT = int(os.environ.get('BIBLIO_DEFAULT_LIMIT', 50))

OPTIONS = {
    'host': HOST,
    'port': PORT,
    'log_level': LOG_LEVEL,
    'reload': DEBUG,
    'workers': WORKERS,
}
if SSL_CRT and SSL_KEY:
    OPTIONS['ssl_keyfile'] = SSL_KEY
    OPTIONS['ssl_certfile'] = SSL_CRT
    SCHEME = 'https'

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST', 'localhost'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'biblio'),
}

# Database configuration
DB_URI = os.environ.get('BIBLIO_DB_URI') or (
    "sqlite:///:memory:" if TESTING else
    'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
)

__all__ = [
    'SCHEME', 'HOST', 'PORT', 'DEBUG', 'OPTIONS', 'DB_URI', 'DB_CONFIG',
    'TESTING', 'SEED', 'LOCK_RETRIES', 'LOCK_TIMEOUT', 'LOAN_DAYS', 'FINE_PER_DAY',
    'DEFAULT_LIMIT', 'CORS_ORIGINS', 'LOG_LEVEL',
]

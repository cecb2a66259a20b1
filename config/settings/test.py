"""Test settings for FieldHub project.

In-memory SQLite, fast password hashing and quiet logging.

SQLite has no row locks, so tests marked ``postgres`` skip themselves there.
To run them against a real server:

    DB_ENGINE=django.db.backends.postgresql DB_NAME=fieldhub DB_USER=fieldhub \\
    DB_PASSWORD=secret DB_HOST=localhost pytest -m postgres

pytest-django creates and drops a ``test_<DB_NAME>`` database for the run.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),  # noqa: F405
        'NAME': os.environ.get('DB_NAME', ':memory:'),  # noqa: F405
        'USER': os.environ.get('DB_USER', ''),  # noqa: F405
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),  # noqa: F405
        'HOST': os.environ.get('DB_HOST', ''),  # noqa: F405
        'PORT': os.environ.get('DB_PORT', ''),  # noqa: F405
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

LOGGING["handlers"]["console"]["level"] = "WARNING"  # noqa: F405

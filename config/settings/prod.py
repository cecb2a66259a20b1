"""Production settings for FieldHub project.

This module extends the base settings with production specific
configuration. Ensure that sensitive values are provided via
environment variables and that security settings are appropriate for
production use. Production is expected to run on PostgreSQL so that
row locks are enforced.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')  # noqa: F405

DATABASES['default']['ENGINE'] = os.environ.get('DB_ENGINE', 'django.db.backends.postgresql')  # noqa: F405
# Lock waits surface as transient errors; clients retry the whole operation.
DATABASES['default'].setdefault('OPTIONS', {})  # noqa: F405
DATABASES['default']['OPTIONS']['options'] = (  # noqa: F405
    f"-c lock_timeout={int(os.environ.get('DB_LOCK_TIMEOUT_MS', 5000))}"  # noqa: F405
)

# Configure secure proxies and cookies
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

"""Development settings."""
from .base import *  # noqa: F401,F403

DEBUG = True

# Warning mails go to the console unless an SMTP relay is configured.
EMAIL_BACKEND = env("EMAIL_BACKEND", default="django.core.mail.backends.console.EmailBackend")  # noqa: F405
EMAIL_HOST = env("EMAIL_HOST", default="localhost")  # noqa: F405
EMAIL_PORT = env.int("EMAIL_PORT", default=25)  # noqa: F405
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="security@backoffice.local")  # noqa: F405

# Run Celery tasks inline so failed-login warnings and sweeps work without a worker.
CELERY_TASK_ALWAYS_EAGER = env.bool("CELERY_TASK_ALWAYS_EAGER", default=True)  # noqa: F405
CELERY_TASK_EAGER_PROPAGATES = True

# Local dashboard on any port.
CORS_ALLOW_ALL_ORIGINS = True

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["admin_login"] = "200/min"  # noqa: F405

LOGGING["loggers"]["backoffice"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["django.db.backends"] = {  # noqa: F405
    "handlers": ["console"],
    "level": env("SQL_LOG_LEVEL", default="INFO"),  # noqa: F405
    "propagate": False,
}

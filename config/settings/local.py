from .base import *  # noqa

DEBUG = True
ALLOWED_HOSTS = ["*"]

# Local DB: leave default sqlite unless DATABASE_URL provided.
DATABASE_URL = os.environ.get("DATABASE_URL", None)
if DATABASE_URL:
    import dj_database_url

    DATABASES["default"] = dj_database_url.parse(DATABASE_URL)

# In local, make email backend console
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# No broker needed for local runs and tests: execute tasks in-process
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "True").lower() in ("1", "true", "yes")
CELERY_TASK_EAGER_PROPAGATES = True

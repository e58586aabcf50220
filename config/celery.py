# config/celery.py
import os
from celery import Celery

# DJANGO_ENV selects local or production settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("consulta")

# Read CELERY_* settings from Django
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks.py in all INSTALLED_APPS
app.autodiscover_tasks()

"""
Expose the settings module matching DJANGO_ENV.
Usage: export DJANGO_ENV=local|production (prod is accepted too)
Default: local
"""
import os

env = os.environ.get("DJANGO_ENV", "local").strip().lower()
if env in ("production", "prod"):
    from .production import *  # noqa
else:
    from .local import *  # noqa

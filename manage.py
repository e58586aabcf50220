#!/usr/bin/env python
"""Command-line entry point for the consultation backend (runserver, migrate, seed_demo, ...)."""
import os
import sys


def main():
    # DJANGO_ENV picks local or production settings (config/settings/__init__.py)
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Make sure it's installed and "
            "available on your PYTHONPATH. Activate your virtualenv if needed."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()

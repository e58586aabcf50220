"""
Lightweight audit hooks for account lifecycle events.
"""
import logging

from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver

from .models import AuditLog, User

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def _audit_user_created(sender, instance: User, created: bool, **kwargs):
    if not created:
        return
    try:
        AuditLog.log(instance, "user.create", {"id": str(instance.id), "role": instance.role})
    except Exception:
        # Never raise from signal
        logger.exception("Audit hook failed for user %s", instance.id)


@receiver(pre_delete, sender=User)
def _audit_user_deleted(sender, instance: User, **kwargs):
    try:
        AuditLog.log(None, "user.delete", {"id": str(instance.id), "email": instance.email})
    except Exception:
        logger.exception("Audit hook failed for user %s", instance.id)

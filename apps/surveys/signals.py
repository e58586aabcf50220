import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.accounts.models import AuditLog

from .models import FormResponse

logger = logging.getLogger(__name__)


@receiver(post_save, sender=FormResponse)
def record_response_submitted(sender, instance, created, **kwargs):
    if not created:
        return
    logger.info("Response %s submitted to form %s by %s", instance.id, instance.form_id, instance.user_id)
    AuditLog.log(actor=instance.user, action="form.response", meta={"form": str(instance.form_id), "response": str(instance.id)})

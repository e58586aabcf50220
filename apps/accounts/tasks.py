import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from .models import PasswordResetToken

logger = logging.getLogger(__name__)


@shared_task
def send_password_reset_email(reset_token_id):
    reset = PasswordResetToken.objects.select_related("user").filter(id=reset_token_id).first()
    if reset is None:
        logger.warning("Reset token %s vanished before the email went out", reset_token_id)
        return False

    link = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={reset.token}"
    send_mail(
        subject="Redefinição de senha",
        message=(
            f"Olá {reset.user.name or reset.user.email},\n\n"
            f"Use o link abaixo para redefinir sua senha:\n{link}\n\n"
            f"O link expira em {settings.PASSWORD_RESET_TOKEN_HOURS} horas."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[reset.user.email],
    )
    return True


@shared_task
def purge_expired_reset_tokens():
    deleted = PasswordResetToken.purge_expired()
    if deleted:
        logger.info("Purged %d expired password reset tokens", deleted)
    return deleted

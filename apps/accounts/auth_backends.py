# accounts/auth_backends.py
from typing import Optional

from django.contrib.auth.backends import ModelBackend
from django.utils import timezone

from .models import User


class EmailBackend(ModelBackend):
    """
    Auth with email (case-insensitive). Accepts either ``email=`` or the
    ``username=`` kwarg Django's own views pass.
    """

    def authenticate(self, request, username: Optional[str] = None, password: Optional[str] = None, **kwargs):
        ident = kwargs.get("email") or username
        if not ident or not password:
            return None

        user = User.objects.filter(email__iexact=str(ident).strip()).first()
        if user is None:
            # Run the default password hasher once to reduce the timing
            # difference between an existing and a nonexistent user.
            User().set_password(password)
            return None

        if not user.check_password(password) or not self.user_can_authenticate(user):
            return None

        user.last_login_at = timezone.now()
        user.save(update_fields=["last_login_at"])
        return user

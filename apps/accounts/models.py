"""
Accounts models: email-based users with an ADMIN/USER role, password reset tokens
and an audit trail.

 - Passwords go through Django's hasher (``set_password``/``check_password``)
 - Social sign-in links (provider, provider id) to a user; such users may have
   no usable password
 - Reset tokens are single-use and expire after PASSWORD_RESET_TOKEN_HOURS
"""
from typing import Optional
import datetime
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import IntegrityError, models
from django.utils import timezone


# ---------------------------------------------------------------------
# BaseEntity
# ---------------------------------------------------------------------
class BaseEntity(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


# ---------------------------------------------------------------------
# User manager
# ---------------------------------------------------------------------
class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, *, email: str, password: Optional[str], name: str = "", **extra):
        """
        Creates and saves a User. Email is the login identifier and is required.
        """
        if not email:
            raise ValueError("Users must have an email address")

        email = self.normalize_email(email).lower()
        user = self.model(email=email, name=(name or "").strip(), **extra)

        if password:
            user.set_password(password)
            user.last_password_change_at = timezone.now()
        else:
            user.set_unusable_password()

        try:
            user.full_clean(exclude=["password"])
            user.save(using=self._db)
        except IntegrityError as e:
            raise ValidationError({"email": ["User already exists"]}) from e

        return user

    def create_user(self, email: str, password: Optional[str] = None, **extra):
        extra.setdefault("role", User.Role.USER)
        extra.setdefault("is_staff", False)
        extra.setdefault("is_superuser", False)
        return self._create_user(email=email, password=password, **extra)

    def create_superuser(self, email: str, password: str, **extra):
        if not password:
            raise ValueError("Superuser must have a password")

        extra.setdefault("role", User.Role.ADMIN)
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        if extra.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email=email, password=password, **extra)

    def get_by_natural_key(self, key: str):
        return self.get(email__iexact=key)


# ---------------------------------------------------------------------
# User model
# ---------------------------------------------------------------------
class User(AbstractBaseUser, PermissionsMixin, BaseEntity):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        USER = "USER", "User"

    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=200, blank=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.USER)

    # social sign-in (Google, Facebook, ...)
    social_provider = models.CharField(max_length=32, blank=True, null=True)
    social_id = models.CharField(max_length=255, blank=True, null=True)

    last_login_at = models.DateTimeField(null=True, blank=True, db_index=True)
    last_password_change_at = models.DateTimeField(null=True, blank=True)

    # Django
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        indexes = [
            models.Index(fields=["role"], name="accounts_us_role_6a4f2e_idx"),
            models.Index(fields=["social_provider", "social_id"], name="accounts_us_social__1c9b3d_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["social_provider", "social_id"],
                condition=models.Q(social_provider__isnull=False, social_id__isnull=False),
                name="uniq_user_social_identity",
            ),
        ]
        ordering = ["-created_at"]
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self) -> str:
        return self.email or f"User {self.pk}"

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    def change_password(self, raw_password: str) -> None:
        self.set_password(raw_password)
        self.last_password_change_at = timezone.now()
        self.save(update_fields=["password", "last_password_change_at", "updated_at"])


# ---------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------
def _new_token() -> str:
    return str(uuid.uuid4())


def _reset_expiry() -> datetime.datetime:
    hours = getattr(settings, "PASSWORD_RESET_TOKEN_HOURS", 24)
    return timezone.now() + datetime.timedelta(hours=hours)


class PasswordResetToken(BaseEntity):
    user = models.ForeignKey(User, related_name="reset_tokens", on_delete=models.CASCADE)
    token = models.CharField(max_length=64, unique=True, default=_new_token)
    expires_at = models.DateTimeField(default=_reset_expiry)

    class Meta:
        indexes = [models.Index(fields=["expires_at"], name="accounts_pa_expires_2b7c40_idx")]

    def __str__(self) -> str:
        return f"reset:{self.user_id}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() > self.expires_at

    @classmethod
    def issue(cls, user: User) -> "PasswordResetToken":
        return cls.objects.create(user=user)

    @classmethod
    def purge_expired(cls) -> int:
        deleted, _ = cls.objects.filter(expires_at__lt=timezone.now()).delete()
        return deleted


# ---------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------
class AuditLog(BaseEntity):
    actor_id = models.UUIDField(null=True, blank=True)
    action = models.CharField(max_length=200, db_index=True)
    meta = models.JSONField(default=dict)

    class Meta:
        indexes = [models.Index(fields=["actor_id", "action"], name="accounts_au_actor_i_5e8d71_idx")]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.action

    @classmethod
    def log(cls, actor, action: str, meta: Optional[dict] = None) -> "AuditLog":
        meta = meta or {}
        actor_id = getattr(actor, "id", None) if actor else None
        return cls.objects.create(actor_id=actor_id, action=action, meta=meta)

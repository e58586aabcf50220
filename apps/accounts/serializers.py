"""
Serializers for accounts app: registration, login (email + password), social sign-in,
password reset/change and the admin-facing user payloads.
"""
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions, serializers

from .models import PasswordResetToken, User


def _check_password_strength(password: str, user: User = None) -> None:
    try:
        validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise serializers.ValidationError(list(exc.messages))


# -------------------------------------------------------------------
# User serializers
# -------------------------------------------------------------------
class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "role",
            "social_provider",
            "social_id",
            "is_active",
            "last_login_at",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """The authenticated user's own editable data."""

    class Meta:
        model = User
        fields = ("id", "email", "name", "role", "created_at", "updated_at")
        read_only_fields = ("id", "role", "created_at", "updated_at")

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        qs = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(_("Email already in use."))
        return value


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=True, trim_whitespace=False)
    name = serializers.CharField(required=True, allow_blank=False)

    class Meta:
        model = User
        fields = ("email", "password", "name")

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(_("User already exists"))
        return value

    def validate(self, attrs):
        try:
            _check_password_strength(attrs["password"], User(email=attrs.get("email"), name=attrs.get("name", "")))
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({"password": exc.detail})
        return attrs

    def create(self, validated_data):
        raw_password = validated_data.pop("password")
        try:
            with transaction.atomic():
                return User.objects.create_user(password=raw_password, **validated_data)
        except DjangoValidationError as exc:
            # Surface model/manager level validation clearly
            raise serializers.ValidationError(exc.message_dict if hasattr(exc, "message_dict") else exc.messages)
        except IntegrityError:
            raise serializers.ValidationError({"email": [_("User already exists")]})


class AdminUserCreateSerializer(RegisterSerializer):
    role = serializers.ChoiceField(choices=User.Role.choices, default=User.Role.USER)

    class Meta(RegisterSerializer.Meta):
        fields = RegisterSerializer.Meta.fields + ("role",)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)


# -------------------------------------------------------------------
# Login / social sign-in
# -------------------------------------------------------------------
class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        # Prefer passing a Django HttpRequest to auth backends
        req = self.context.get("request")
        if hasattr(req, "_request"):
            req = req._request

        user = authenticate(request=req, email=attrs["email"], password=attrs["password"])
        if user is None:
            raise exceptions.AuthenticationFailed(_("Invalid credentials"))

        attrs["user"] = user
        return attrs


class SocialLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField()
    social_provider = serializers.CharField(max_length=32)
    social_id = serializers.CharField(max_length=255)

    def save(self, **kwargs) -> User:
        """
        Resolve the account for a provider identity:
          1. an account already linked to (provider, id)
          2. an account with the same email, which gets linked
          3. a new USER account without a usable password
        """
        data = self.validated_data
        provider = data["social_provider"].strip().lower()
        social_id = data["social_id"].strip()

        with transaction.atomic():
            user = User.objects.filter(social_provider=provider, social_id=social_id).first()
            if user is not None:
                self.created = False
                return user

            user = User.objects.select_for_update().filter(email__iexact=data["email"]).first()
            if user is not None:
                user.social_provider = provider
                user.social_id = social_id
                user.save(update_fields=["social_provider", "social_id", "updated_at"])
                self.created = False
                return user

            self.created = True
            return User.objects.create_user(
                email=data["email"],
                password=None,
                name=data["name"],
                social_provider=provider,
                social_id=social_id,
            )


# -------------------------------------------------------------------
# Password reset / change
# -------------------------------------------------------------------
class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value: str) -> str:
        user = User.objects.filter(email__iexact=value.strip(), is_active=True).first()
        if user is None:
            raise exceptions.NotFound(_("User not found"))
        self.user = user
        return value


class ResetTokenSerializer(serializers.Serializer):
    token = serializers.CharField()

    def validate_token(self, value: str) -> str:
        reset = PasswordResetToken.objects.select_related("user").filter(token=value).first()
        if reset is None:
            raise serializers.ValidationError(_("Invalid reset token"))
        if reset.is_expired:
            reset.delete()
            raise serializers.ValidationError(_("Reset token has expired"))
        self.reset = reset
        return value


class ResetPasswordSerializer(ResetTokenSerializer):
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        try:
            _check_password_strength(attrs["new_password"], self.reset.user)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({"new_password": exc.detail})
        return attrs

    def save(self, **kwargs) -> User:
        user = self.reset.user
        with transaction.atomic():
            user.change_password(self.validated_data["new_password"])
            self.reset.delete()
        return user


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value: str) -> str:
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError(_("Current password is incorrect"))
        return value

    def validate(self, attrs):
        try:
            _check_password_strength(attrs["new_password"], self.context["request"].user)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({"new_password": exc.detail})
        return attrs

    def save(self, **kwargs) -> User:
        user = self.context["request"].user
        user.change_password(self.validated_data["new_password"])
        return user

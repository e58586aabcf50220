"""
Accounts views with JWT-based auth.

- Register, login and social sign-in issue SimpleJWT tokens (access + refresh).
- Logout blacklists the refresh token when one is supplied.
- Password reset runs through single-use tokens mailed by a Celery task.
- User administration is restricted to administrators; every user manages
  their own profile and password.
"""
import logging

from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework import filters, mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse

# SimpleJWT
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from common.permissions import IsAdmin

from .models import AuditLog, PasswordResetToken, User
from .serializers import (
    AdminUserCreateSerializer,
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    ResetTokenSerializer,
    RoleSerializer,
    SocialLoginSerializer,
    UserSerializer,
)
from .tasks import send_password_reset_email

logger = logging.getLogger(__name__)


# -----------------------------
# JWT helpers
# -----------------------------
class JWTTokensSerializer(serializers.Serializer):
    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    token_type = serializers.CharField(default="Bearer", read_only=True)
    user = UserSerializer(read_only=True)


def issue_tokens_for_user(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
        "token_type": "Bearer",
    }


def auth_payload(user: User, request) -> dict:
    return {**issue_tokens_for_user(user), "user": UserSerializer(user, context={"request": request}).data}


class PublicAuthView(APIView):
    """
    Anonymous endpoints. Bad credentials still answer 401 with a
    WWW-Authenticate header instead of DRF's 403 fallback.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        return 'Bearer realm="api"'


# -----------------------------
# Auth endpoints: Register/Login/Logout (JWT)
# -----------------------------
@extend_schema_view(
    create=extend_schema(
        summary="Register a new account (returns JWT)",
        description="Create a citizen (USER) account and return access/refresh JWT tokens plus the user payload.",
        request=RegisterSerializer,
        responses={201: JWTTokensSerializer, 400: OpenApiResponse(description="User already exists or invalid data")},
        tags=["Auth"],
    )
)
class RegisterView(mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        AuditLog.log(actor=user, action="user.register", meta={"email": user.email})
        logger.info("Registered user %s", user.id)
        return Response(auth_payload(user, request), status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Login (email + password) -> returns JWT",
    request=LoginSerializer,
    responses={200: JWTTokensSerializer, 401: OpenApiResponse(description="Invalid credentials")},
    tags=["Auth"],
)
class LoginView(PublicAuthView):
    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        AuditLog.log(actor=user, action="user.login", meta={"ip": request.META.get("REMOTE_ADDR")})
        return Response(auth_payload(user, request), status=status.HTTP_200_OK)


@extend_schema(
    summary="Social login -> returns JWT",
    description=(
        "Sign in with an identity already verified by an OAuth provider. Links the provider identity "
        "to an existing account with the same email, or creates a new citizen account."
    ),
    request=SocialLoginSerializer,
    responses={200: JWTTokensSerializer},
    tags=["Auth"],
)
class SocialLoginView(PublicAuthView):
    def post(self, request):
        serializer = SocialLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        if not user.is_active:
            raise PermissionDenied(_("User account is disabled."))

        AuditLog.log(
            actor=user,
            action="user.social_login",
            meta={"provider": user.social_provider, "created": serializer.created},
        )
        return Response(auth_payload(user, request), status=status.HTTP_200_OK)


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False)


@extend_schema(
    summary="Logout (JWT)",
    description="Pass a refresh token to revoke it. Clients should discard their access token.",
    request=LogoutSerializer,
    responses={204: OpenApiResponse(description="logged out")},
    tags=["Auth"],
)
class LogoutView(APIView):
    authentication_classes = (JWTAuthentication,)
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        data = LogoutSerializer(data=request.data or {})
        data.is_valid(raise_exception=True)
        refresh = data.validated_data.get("refresh")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError as exc:
                logger.info("Logout with unusable refresh token for %s: %s", request.user.id, exc)
        AuditLog.log(actor=request.user, action="user.logout", meta={})
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(summary="Get current authenticated user", responses={200: UserSerializer}, tags=["Auth"])
class MeView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        return Response(UserSerializer(request.user).data)


# -----------------------------
# Password reset
# -----------------------------
@extend_schema(
    summary="Request a password reset link",
    request=ForgotPasswordSerializer,
    responses={200: OpenApiResponse(description="reset link sent"), 404: OpenApiResponse(description="User not found")},
    tags=["Auth"],
)
class ForgotPasswordView(PublicAuthView):
    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reset = PasswordResetToken.issue(serializer.user)
        send_password_reset_email.delay(str(reset.id))

        AuditLog.log(actor=serializer.user, action="user.password_reset_requested", meta={})
        payload = {
            "success": True,
            "message": _("Password reset link sent to your email"),
            "expires_at": reset.expires_at,
        }
        if settings.DEBUG:
            # lets the demo client complete the flow without a mailbox
            payload["token"] = reset.token
        return Response(payload)


@extend_schema(
    summary="Reset password with a reset token",
    request=ResetPasswordSerializer,
    responses={200: OpenApiResponse(description="password changed"), 400: OpenApiResponse(description="Invalid or expired token")},
    tags=["Auth"],
)
class ResetPasswordView(PublicAuthView):
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        AuditLog.log(actor=user, action="user.password_reset", meta={})
        return Response({"success": True, "message": _("Password reset successfully")})


@extend_schema(
    summary="Validate a password reset token",
    request=None,
    responses={200: OpenApiResponse(description="valid"), 400: OpenApiResponse(description="Invalid or expired token")},
    tags=["Auth"],
)
class ValidateResetTokenView(PublicAuthView):
    def get(self, request, token: str):
        serializer = ResetTokenSerializer(data={"token": token})
        serializer.is_valid(raise_exception=True)
        return Response({"success": True, "message": _("Valid reset token")})


# -----------------------------
# Users
# -----------------------------
@extend_schema_view(
    list=extend_schema(summary="List users (admin)", tags=["Users"]),
    retrieve=extend_schema(summary="Retrieve user (admin)", tags=["Users"]),
    destroy=extend_schema(summary="Delete user (admin)", tags=["Users"]),
)
class UserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["role", "is_active"]
    search_fields = ["email", "name"]
    ordering_fields = ["created_at", "email", "name"]

    def get_permissions(self):
        if self.action in ("profile", "change_password"):
            return [IsAuthenticated()]
        return super().get_permissions()

    def perform_destroy(self, instance):
        if instance == self.request.user:
            raise PermissionDenied(_("You cannot delete your own account."))
        AuditLog.log(actor=self.request.user, action="admin.user_delete", meta={"id": str(instance.id), "email": instance.email})
        instance.delete()

    @extend_schema(summary="Change a user's role (admin)", request=RoleSerializer, responses={200: UserSerializer}, tags=["Users"])
    @action(detail=True, methods=["put", "patch"])
    def role(self, request, pk=None):
        user = self.get_object()
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if user == request.user and serializer.validated_data["role"] != User.Role.ADMIN:
            raise PermissionDenied(_("You cannot remove your own admin role."))
        user.role = serializer.validated_data["role"]
        user.save(update_fields=["role", "updated_at"])
        AuditLog.log(actor=request.user, action="user.role", meta={"id": str(user.id), "role": user.role})
        return Response(UserSerializer(user).data)

    @extend_schema(
        summary="Create a user with a role (admin)",
        request=AdminUserCreateSerializer,
        responses={201: UserSerializer},
        tags=["Users"],
    )
    @action(detail=False, methods=["post"])
    def register(self, request):
        serializer = AdminUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        AuditLog.log(actor=request.user, action="admin.user_create", meta={"id": str(user.id), "role": user.role})
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        methods=["GET"], summary="Get own profile", responses={200: ProfileSerializer}, tags=["Users"]
    )
    @extend_schema(
        methods=["PUT", "PATCH"], summary="Update own profile", request=ProfileSerializer,
        responses={200: ProfileSerializer}, tags=["Users"],
    )
    @action(detail=False, methods=["get", "put", "patch"])
    def profile(self, request):
        if request.method == "GET":
            return Response(ProfileSerializer(request.user).data)
        serializer = ProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @extend_schema(
        summary="Change own password",
        request=ChangePasswordSerializer,
        responses={200: OpenApiResponse(description="password changed")},
        tags=["Users"],
    )
    @action(detail=False, methods=["post"], url_path="change-password")
    def change_password(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        AuditLog.log(actor=request.user, action="user.password_change", meta={})
        return Response({"success": True, "message": _("Password changed successfully")})

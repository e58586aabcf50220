from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ForgotPasswordView,
    LoginView,        # APIView (returns JWTs)
    LogoutView,       # APIView (blacklists refresh)
    MeView,
    RegisterView,     # ViewSet (create -> JWTs)
    ResetPasswordView,
    SocialLoginView,
    UserViewSet,
    ValidateResetTokenView,
)

# SimpleJWT endpoints (tooling-friendly)
from rest_framework_simplejwt.views import (
    TokenRefreshView,      # {refresh} -> {access}
    TokenVerifyView,       # {token} -> {} if valid
)

router = DefaultRouter()

# Auth (registration via ViewSet create)
router.register(r"auth/register", RegisterView, basename="auth-register")
router.register(r"users", UserViewSet, basename="users")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", MeView.as_view(), name="auth-me"),
    path("auth/social-login/", SocialLoginView.as_view(), name="auth-social-login"),
    path("auth/forgot-password/", ForgotPasswordView.as_view(), name="auth-forgot-password"),
    path("auth/reset-password/", ResetPasswordView.as_view(), name="auth-reset-password"),
    path(
        "auth/validate-reset-token/<str:token>/",
        ValidateResetTokenView.as_view(),
        name="auth-validate-reset-token",
    ),

    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/jwt/verify/", TokenVerifyView.as_view(), name="jwt-verify"),

    path("", include(router.urls)),
]

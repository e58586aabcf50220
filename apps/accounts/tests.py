import datetime

from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from .models import AuditLog, PasswordResetToken, User

PASSWORD = "Consulta#2026"


class UserManagerTests(TestCase):
    def test_create_user_normalizes_email_and_hashes_password(self):
        user = User.objects.create_user(email="Maria@Example.COM", password=PASSWORD, name="Maria")
        self.assertEqual(user.email, "maria@example.com")
        self.assertEqual(user.role, User.Role.USER)
        self.assertNotEqual(user.password, PASSWORD)
        self.assertTrue(user.check_password(PASSWORD))

    def test_social_user_has_unusable_password(self):
        user = User.objects.create_user(email="ana@example.com", name="Ana", social_provider="google", social_id="g-1")
        self.assertFalse(user.has_usable_password())

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password=PASSWORD, name="Root")
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_staff)

    def test_user_creation_is_audited(self):
        user = User.objects.create_user(email="joao@example.com", password=PASSWORD, name="João")
        self.assertTrue(AuditLog.objects.filter(actor_id=user.id, action="user.create").exists())


class AuthApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="citizen@example.com", password=PASSWORD, name="Cidadã")

    def test_register_returns_tokens_and_user(self):
        res = self.client.post(
            reverse("auth-register-list"),
            {"email": "New@Example.com", "password": PASSWORD, "name": "Nova"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["user"]["email"], "new@example.com")
        self.assertEqual(res.data["user"]["role"], User.Role.USER)

    def test_register_duplicate_email(self):
        res = self.client.post(
            reverse("auth-register-list"),
            {"email": "citizen@example.com", "password": PASSWORD, "name": "Outra"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("User already exists", str(res.data["email"]))

    def test_login_and_me(self):
        res = self.client.post(reverse("auth-login"), {"email": "CITIZEN@example.com", "password": PASSWORD}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
        me = self.client.get(reverse("auth-me"))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["email"], "citizen@example.com")

    def test_login_bad_credentials_is_401(self):
        res = self.client.post(reverse("auth-login"), {"email": "citizen@example.com", "password": "wrong"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["message"], "Invalid credentials")

    def test_me_requires_authentication(self):
        res = self.client.get(reverse("auth-me"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_blacklists_refresh_token(self):
        login = self.client.post(reverse("auth-login"), {"email": "citizen@example.com", "password": PASSWORD}, format="json")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        res = self.client.post(reverse("auth-logout"), {"refresh": login.data["refresh"]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)

        refresh = self.client.post(reverse("jwt-refresh"), {"refresh": login.data["refresh"]}, format="json")
        self.assertEqual(refresh.status_code, status.HTTP_401_UNAUTHORIZED)


class SocialLoginTests(APITestCase):
    url = "auth-social-login"

    def payload(self, **overrides):
        data = {"email": "social@example.com", "name": "Social", "social_provider": "Google", "social_id": "abc-1"}
        data.update(overrides)
        return data

    def test_creates_user_on_first_sign_in(self):
        res = self.client.post(reverse(self.url), self.payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        user = User.objects.get(email="social@example.com")
        self.assertEqual(user.social_provider, "google")
        self.assertFalse(user.has_usable_password())

    def test_links_existing_account_by_email(self):
        existing = User.objects.create_user(email="social@example.com", password=PASSWORD, name="Existing")
        res = self.client.post(reverse(self.url), self.payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        existing.refresh_from_db()
        self.assertEqual(existing.social_id, "abc-1")
        self.assertEqual(User.objects.count(), 1)

    def test_finds_user_by_provider_identity(self):
        self.client.post(reverse(self.url), self.payload(), format="json")
        res = self.client.post(reverse(self.url), self.payload(email="changed@example.com"), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["user"]["email"], "social@example.com")
        self.assertEqual(User.objects.count(), 1)


@override_settings(DEBUG=True)
class PasswordResetTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="reset@example.com", password=PASSWORD, name="Reset")

    def test_forgot_password_issues_token_and_mails_link(self):
        res = self.client.post(reverse("auth-forgot-password"), {"email": "reset@example.com"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        token = PasswordResetToken.objects.get(user=self.user)
        self.assertEqual(res.data["token"], token.token)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(f"reset-password?token={token.token}", mail.outbox[0].body)

    def test_forgot_password_unknown_email(self):
        res = self.client.post(reverse("auth-forgot-password"), {"email": "nobody@example.com"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["message"], "User not found")

    def test_reset_password_consumes_token(self):
        reset = PasswordResetToken.issue(self.user)
        res = self.client.post(
            reverse("auth-reset-password"), {"token": reset.token, "new_password": "Nova#Senha2026"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Nova#Senha2026"))
        self.assertFalse(PasswordResetToken.objects.filter(pk=reset.pk).exists())

    def test_reset_password_invalid_token(self):
        res = self.client.post(
            reverse("auth-reset-password"), {"token": "nope", "new_password": "Nova#Senha2026"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid reset token", str(res.data["token"]))

    def test_expired_token_is_deleted(self):
        reset = PasswordResetToken.issue(self.user)
        reset.expires_at = timezone.now() - datetime.timedelta(minutes=1)
        reset.save(update_fields=["expires_at"])

        res = self.client.get(reverse("auth-validate-reset-token", args=[reset.token]))
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Reset token has expired", str(res.data["token"]))
        self.assertFalse(PasswordResetToken.objects.filter(pk=reset.pk).exists())

    def test_validate_token(self):
        reset = PasswordResetToken.issue(self.user)
        res = self.client.get(reverse("auth-validate-reset-token", args=[reset.token]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_purge_expired_reset_tokens_task(self):
        from .tasks import purge_expired_reset_tokens

        expired = PasswordResetToken.issue(self.user)
        PasswordResetToken.objects.filter(pk=expired.pk).update(expires_at=timezone.now() - datetime.timedelta(hours=1))
        fresh = PasswordResetToken.issue(self.user)

        self.assertEqual(purge_expired_reset_tokens(), 1)
        self.assertTrue(PasswordResetToken.objects.filter(pk=fresh.pk).exists())


class UserAdministrationTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password=PASSWORD, name="Admin", role=User.Role.ADMIN)
        self.citizen = User.objects.create_user(email="citizen@example.com", password=PASSWORD, name="Cidadão")

    def test_citizen_cannot_list_users(self):
        self.client.force_authenticate(self.citizen)
        res = self.client.get(reverse("users-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_users(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("users-list"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["meta"]["count"], 2)

    def test_admin_changes_role(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(reverse("users-role", args=[self.citizen.pk]), {"role": "ADMIN"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.citizen.refresh_from_db()
        self.assertTrue(self.citizen.is_admin)

    def test_admin_cannot_demote_self(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(reverse("users-role", args=[self.admin.pk]), {"role": "USER"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_delete_self(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("users-detail", args=[self.admin.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes_user(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("users-detail", args=[self.citizen.pk]))
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.citizen.pk).exists())

    def test_admin_registers_user_with_role(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("users-register"),
            {"email": "staff@example.com", "password": PASSWORD, "name": "Equipe", "role": "ADMIN"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["role"], "ADMIN")


class ProfileTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="perfil@example.com", password=PASSWORD, name="Perfil")
        self.client.force_authenticate(self.user)

    def test_get_and_update_profile(self):
        res = self.client.get(reverse("users-profile"))
        self.assertEqual(res.data["email"], "perfil@example.com")

        res = self.client.patch(reverse("users-profile"), {"name": "Novo Nome"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Novo Nome")

    def test_profile_email_must_be_unique(self):
        User.objects.create_user(email="taken@example.com", password=PASSWORD, name="Taken")
        res = self.client.patch(reverse("users-profile"), {"email": "taken@example.com"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password(self):
        res = self.client.post(
            reverse("users-change-password"),
            {"current_password": PASSWORD, "new_password": "Outra#Senha2026"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Outra#Senha2026"))

    def test_change_password_wrong_current(self):
        res = self.client.post(
            reverse("users-change-password"),
            {"current_password": "wrong-one", "new_password": "Outra#Senha2026"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

import datetime

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import AuditLog, User

from .fields import FieldDefinition, is_unanswered, resolve_value
from .models import Form, FormResponse

PASSWORD = "Consulta#2026"

FIELDS = [
    {"id": "field-1", "type": "text", "label": "Nome", "required": True},
    {"id": "field-2", "type": "email", "label": "Email", "required": False},
    {"id": "field-3", "type": "checkbox", "label": "Linhas", "required": False, "options": ["101", "202"]},
    {"id": "intro", "type": "static_text", "label": "Obrigado por participar", "required": True},
]


class ValueLookupTests(SimpleTestCase):
    definition = FieldDefinition(id="field-1", type="text", label="Nome")

    def test_unanswered_values(self):
        for value in (None, False, 0, 0.0, float("nan"), ""):
            self.assertTrue(is_unanswered(value), value)
        for value in ("0", 1, [], ["A"], True):
            self.assertFalse(is_unanswered(value), value)

    def test_id_wins_over_label(self):
        self.assertEqual(resolve_value({"field-1": "Ana", "Nome": "Legacy"}, self.definition), "Ana")

    def test_falls_back_to_label(self):
        self.assertEqual(resolve_value({"Nome": "Legacy"}, self.definition), "Legacy")
        self.assertEqual(resolve_value({"field-1": "", "Nome": "Legacy"}, self.definition), "Legacy")

    def test_missing_and_non_mapping_data(self):
        self.assertIsNone(resolve_value({}, self.definition))
        self.assertIsNone(resolve_value(["field-1"], self.definition))

    def test_from_dict_tolerates_legacy_name_key(self):
        definition = FieldDefinition.from_dict({"id": "x", "type": "radio", "name": "Old label", "options": ["a"]})
        self.assertEqual(definition.label, "Old label")
        self.assertTrue(definition.is_choice)
        self.assertFalse(FieldDefinition.from_dict({"type": "divider"}).is_substantive)


class FormApiTestBase(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password=PASSWORD, name="Admin", role=User.Role.ADMIN)
        self.citizen = User.objects.create_user(email="citizen@example.com", password=PASSWORD, name="Cidadão")
        self.form = Form.objects.create(title="Transporte", description="Consulta", fields=FIELDS, created_by=self.admin)

    def submit(self, data, form=None, **extra):
        form = form or self.form
        return self.client.post(reverse("form-responses", args=[form.pk]), {"data": data, **extra}, format="json")


class FormManagementTests(FormApiTestBase):
    def test_admin_creates_form_and_ids_are_assigned(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("form-list"),
            {
                "title": "Nova consulta",
                "fields": [
                    {"id": "field-1", "type": "text", "label": "Bairro"},
                    {"type": "radio", "label": "Prioridade", "options": ["Alta", "Baixa"]},
                    {"type": "divider"},
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        ids = [f["id"] for f in res.data["fields"]]
        self.assertEqual(ids, ["field-1", "field-2", "field-3"])
        self.assertEqual(res.data["created_by"]["email"], "admin@example.com")
        self.assertTrue(AuditLog.objects.filter(action="form.create").exists())

    def test_rejects_unknown_type_and_duplicate_ids(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("form-list"),
            {"title": "X", "fields": [{"id": "a", "type": "slider", "label": "Nível"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post(
            reverse("form-list"),
            {"title": "X", "fields": [
                {"id": "a", "type": "text", "label": "Um"},
                {"id": "a", "type": "text", "label": "Dois"},
            ]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_choice_field_needs_options_and_label(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("form-list"),
            {"title": "X", "fields": [{"type": "select", "label": "Escolha"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        res = self.client.post(reverse("form-list"), {"title": "X", "fields": [{"type": "text"}]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_citizen_cannot_manage_forms(self):
        self.client.force_authenticate(self.citizen)
        self.assertEqual(self.client.get(reverse("form-list")).status_code, status.HTTP_403_FORBIDDEN)
        res = self.client.post(reverse("form-list"), {"title": "X"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_list_includes_response_count(self):
        FormResponse.objects.create(form=self.form, user=self.citizen, data={"field-1": "Ana"})
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-list"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["results"][0]["response_count"], 1)

    def test_delete_cascades_to_responses(self):
        FormResponse.objects.create(form=self.form, user=self.citizen, data={"field-1": "Ana"})
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("form-detail", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(FormResponse.objects.exists())

    def test_active_forms_for_citizens(self):
        Form.objects.create(title="Rascunho", fields=[], is_active=False, created_by=self.admin)
        self.client.force_authenticate(self.citizen)
        res = self.client.get(reverse("form-active"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([f["title"] for f in res.data["results"]], ["Transporte"])

    def test_retrieve_reports_has_responded(self):
        self.client.force_authenticate(self.citizen)
        res = self.client.get(reverse("form-detail", args=[self.form.pk]))
        self.assertFalse(res.data["has_responded"])

        FormResponse.objects.create(form=self.form, user=self.citizen, data={"field-1": "Ana"})
        res = self.client.get(reverse("form-detail", args=[self.form.pk]))
        self.assertTrue(res.data["has_responded"])
        self.assertEqual(res.data["response_count"], 1)

    def test_stats_overview(self):
        FormResponse.objects.create(form=self.form, user=self.citizen, data={"field-1": "Ana"})
        Form.objects.create(title="Rascunho", fields=[], is_active=False, created_by=self.admin)
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-stats-overview"))
        self.assertEqual(
            res.data["stats"], {"totalUsers": 2, "totalForms": 2, "totalResponses": 1, "activeForms": 1}
        )


class ResponseSubmissionTests(FormApiTestBase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(self.citizen)

    def test_submit_response(self):
        started = timezone.now() - datetime.timedelta(minutes=5)
        res = self.submit({"field-1": "Ana", "field-3": ["101"]}, started_at=started.isoformat())
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        response = FormResponse.objects.get()
        self.assertEqual(response.user, self.citizen)
        self.assertEqual(response.data["field-3"], ["101"])
        self.assertAlmostEqual((response.submitted_at - response.created_at).total_seconds(), 300, delta=5)

    def test_presentational_fields_are_not_required(self):
        res = self.submit({"field-1": "Ana"})
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

    def test_required_field_missing(self):
        res = self.submit({"field-2": "ana@example.com"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("field-1", res.data["data"])

    def test_invalid_email(self):
        res = self.submit({"field-1": "Ana", "field-2": "not-an-email"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("field-2", res.data["data"])

    def test_only_one_response_per_user(self):
        self.assertEqual(self.submit({"field-1": "Ana"}).status_code, status.HTTP_201_CREATED)
        res = self.submit({"field-1": "Ana de novo"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["message"], "You have already responded to this form")
        self.assertEqual(FormResponse.objects.count(), 1)

    def test_inactive_form(self):
        self.form.is_active = False
        self.form.save()
        res = self.submit({"field-1": "Ana"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["message"], "Form is not active")

    def test_missing_form(self):
        res = self.client.post(
            "/api/v1/forms/00000000-0000-0000-0000-000000000000/responses/", {"data": {}}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_count_and_check(self):
        self.submit({"field-1": "Ana"})
        res = self.client.get(reverse("form-responses-count", args=[self.form.pk]))
        self.assertEqual(res.data["count"], 1)
        res = self.client.get(reverse("form-responses-check", args=[self.form.pk]))
        self.assertTrue(res.data["hasResponded"])

    def test_user_responses(self):
        self.submit({"field-1": "Ana"})
        res = self.client.get(reverse("form-user-responses"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data[0]["form_title"], "Transporte")

    def test_citizen_cannot_list_form_responses(self):
        res = self.client.get(reverse("form-responses", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_form_responses_newest_first(self):
        other = User.objects.create_user(email="other@example.com", password=PASSWORD, name="Outra")
        now = timezone.now()
        FormResponse.objects.create(form=self.form, user=self.citizen, data={}, submitted_at=now - datetime.timedelta(hours=1))
        FormResponse.objects.create(form=self.form, user=other, data={}, submitted_at=now)

        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-responses", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([r["user_email"] for r in res.data["responses"]], ["other@example.com", "citizen@example.com"])


class SeedDemoCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_demo", verbosity=0)
        call_command("seed_demo", verbosity=0)
        self.assertEqual(Form.objects.count(), 3)
        self.assertTrue(User.objects.get(email="admin@example.com").is_admin)
        self.assertTrue(User.objects.get(email="user@example.com").check_password("user123"))

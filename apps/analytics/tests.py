import datetime
from decimal import Decimal

from django.test import SimpleTestCase
from django.urls import reverse
from django.utils import timezone, translation
from rest_framework import status
from rest_framework.test import APITestCase

from apps.accounts.models import User
from apps.surveys.fields import FieldDefinition
from apps.surveys.models import Form, FormResponse

from . import exports
from .calculator import analyse_fields, parse_number, top_values
from .completion import average_completion_minutes
from .identity import Identity
from .report import build_report
from .snapshot import FormSnapshot, ResponseSnapshot
from .trends import response_trends

UTC = datetime.timezone.utc
NOW = datetime.datetime(2026, 10, 17, 12, 0, tzinfo=UTC)

FIELDS = [
    FieldDefinition(id="name", type="text", label="Nome"),
    FieldDefinition(id="intro", type="static_text", label="Bem-vindo"),
    FieldDefinition(id="age", type="number", label="Idade"),
    FieldDefinition(id="lines", type="checkbox", label="Linhas", options=["A", "B", "C"]),
    FieldDefinition(id="sep", type="divider", label=""),
    FieldDefinition(id="mode", type="radio", label="Modo", options=["Ônibus", "Metrô"]),
]


def snapshot_response(n, data, submitted_at=NOW, created_at=None):
    return ResponseSnapshot(
        id=f"r{n}",
        user_id=f"u{n}",
        user_name=f"User {n}",
        user_email=f"user{n}@example.com",
        data=data,
        submitted_at=submitted_at,
        created_at=created_at if created_at is not None else submitted_at,
    )


class FieldAnalyticsTests(SimpleTestCase):
    def setUp(self):
        self.responses = [
            snapshot_response(1, {"name": "Ana", "age": 10, "lines": ["A", "B"], "mode": "Ônibus"}),
            snapshot_response(2, {"name": "Bia", "age": "20", "lines": ["A"]}),
            snapshot_response(3, {"Nome": "Caio", "age": "abc", "lines": ["B", "C"], "mode": "Metrô"}),
            snapshot_response(4, {"age": "30 anos", "mode": "Ônibus"}),
        ]

    def test_one_entry_per_substantive_field_in_order(self):
        result = analyse_fields(FIELDS, self.responses)
        self.assertEqual([f.field_id for f in result], ["name", "age", "lines", "mode"])

    def test_completion_rate_uses_label_fallback(self):
        name = analyse_fields(FIELDS, self.responses)[0]
        self.assertEqual(name.total_responses, 3)
        self.assertEqual(name.completion_rate, 75.0)

    def test_completion_rate_rounds_to_two_places(self):
        responses = self.responses[:3]
        mode = analyse_fields(FIELDS, responses)[3]
        self.assertEqual(mode.completion_rate, 66.67)

    def test_average_skips_unparseable_numbers(self):
        age = analyse_fields(FIELDS, self.responses)[1]
        self.assertEqual(age.average_value, Decimal("20.00"))
        self.assertEqual(age.top_values, [])

    def test_checkbox_counts_each_selection(self):
        lines = analyse_fields(FIELDS, self.responses)[2]
        self.assertEqual(
            [(v.value, v.count, v.percentage) for v in lines.top_values],
            [("A", 2, 40), ("B", 2, 40), ("C", 1, 20)],
        )
        self.assertIsNone(lines.average_value)

    def test_no_responses(self):
        result = analyse_fields(FIELDS, [])
        self.assertTrue(all(f.completion_rate == 0 and f.total_responses == 0 for f in result))
        self.assertIsNone(result[1].average_value)
        self.assertEqual(result[2].top_values, [])

    def test_zero_and_empty_string_are_unanswered(self):
        responses = [snapshot_response(1, {"age": 0}), snapshot_response(2, {"age": ""}), snapshot_response(3, {"age": 4})]
        age = analyse_fields(FIELDS, responses)[1]
        self.assertEqual(age.total_responses, 1)
        self.assertEqual(age.completion_rate, 33.33)
        self.assertEqual(age.average_value, Decimal("4.00"))

    def test_average_of_huge_answers(self):
        age = analyse_fields(FIELDS, [snapshot_response(1, {"age": "1e30"})])[1]
        self.assertEqual(int(age.average_value), int(1e30))
        self.assertEqual(age.average_value.as_tuple().exponent, -2)

    def test_average_when_the_sum_overflows(self):
        responses = [snapshot_response(1, {"age": 1e308}), snapshot_response(2, {"age": "1e308"})]
        age = analyse_fields(FIELDS, responses)[1]
        self.assertEqual(int(age.average_value), int(1e308))

    def test_idempotent(self):
        self.assertEqual(analyse_fields(FIELDS, self.responses), analyse_fields(FIELDS, self.responses))

    def test_parse_number(self):
        self.assertEqual(parse_number("12abc"), 12.0)
        self.assertEqual(parse_number("  -3.5e1x"), -35.0)
        self.assertEqual(parse_number(".5"), 0.5)
        self.assertEqual(parse_number(["7", "8"]), 7.0)
        self.assertIsNone(parse_number("abc"))
        self.assertIsNone(parse_number(True))
        self.assertIsNone(parse_number("1e999"))

    def test_top_values_limit_and_tie_order(self):
        answers = ["f", "e", "d", "c", "b", "a", "a"]
        result = top_values(answers)
        self.assertEqual([v.value for v in result], ["a", "f", "e", "d", "c"])
        self.assertEqual(result[0].percentage, 29)

    def test_top_values_stringify_like_the_client(self):
        result = top_values([1, 1.0, True, "1"])
        self.assertEqual([(v.value, v.count) for v in result], [("1", 3), ("true", 1)])


class TrendTests(SimpleTestCase):
    def test_always_seven_points(self):
        points = response_trends([], NOW, tz=UTC)
        self.assertEqual(len(points), 7)
        self.assertTrue(all(p.count == 0 for p in points))
        self.assertEqual(points[0].day, datetime.date(2026, 10, 11))
        self.assertEqual(points[-1].day, datetime.date(2026, 10, 17))

    def test_buckets_by_calendar_day(self):
        responses = [
            snapshot_response(1, {}, NOW - datetime.timedelta(hours=1)),
            snapshot_response(2, {}, NOW - datetime.timedelta(hours=11, minutes=30)),
            snapshot_response(3, {}, NOW - datetime.timedelta(days=1)),
            # after the cutoff but on a day outside the window
            snapshot_response(4, {}, NOW - datetime.timedelta(days=6, hours=13)),
            snapshot_response(5, {}, NOW - datetime.timedelta(days=8)),
        ]
        points = response_trends(responses, NOW, tz=UTC)
        self.assertEqual([p.count for p in points], [0, 0, 0, 0, 0, 1, 2])

    def test_labels_follow_active_language(self):
        with translation.override("en"):
            points = response_trends([], NOW, tz=UTC)
        self.assertEqual(points[-1].label, "Oct 17")


class CompletionTimeTests(SimpleTestCase):
    def test_average_minutes(self):
        responses = [
            snapshot_response(1, {}, NOW, NOW - datetime.timedelta(minutes=4)),
            snapshot_response(2, {}, NOW, NOW - datetime.timedelta(minutes=7)),
        ]
        self.assertEqual(average_completion_minutes(responses), 6)

    def test_keeps_negative_durations(self):
        responses = [
            snapshot_response(1, {}, NOW, NOW + datetime.timedelta(minutes=10)),
            snapshot_response(2, {}, NOW, NOW - datetime.timedelta(minutes=2)),
        ]
        self.assertEqual(average_completion_minutes(responses), -4)

    def test_empty(self):
        self.assertEqual(average_completion_minutes([]), 0)


class ReportAndExportTests(SimpleTestCase):
    def setUp(self):
        self.form = FormSnapshot(
            id="form-1",
            title="Transporte",
            fields=FIELDS,
            responses=[
                snapshot_response(2, {"name": "Bia", "lines": ["A", "C"], "Modo": "Metrô"}, NOW, NOW - datetime.timedelta(minutes=3)),
                snapshot_response(1, {"name": "Ana", "age": 31}, NOW - datetime.timedelta(days=1), NOW - datetime.timedelta(days=1, minutes=5)),
            ],
        )

    def test_report(self):
        report = build_report(self.form, NOW)
        self.assertEqual(report.total_responses, 2)
        self.assertEqual(report.completion_rate, 100)
        self.assertEqual(report.average_completion_time, 4)
        self.assertEqual(len(report.field_analytics), 4)
        self.assertEqual(len(report.response_trends), 7)
        self.assertEqual([r.id for r in report.recent_responses], ["r2", "r1"])

    def test_empty_report(self):
        report = build_report(FormSnapshot(id="f", title="Vazio", fields=FIELDS), NOW)
        self.assertEqual(report.total_responses, 0)
        self.assertEqual(report.completion_rate, 0)
        self.assertEqual(report.average_completion_time, 0)
        self.assertEqual(report.recent_responses, [])

    def test_recent_responses_are_capped(self):
        form = FormSnapshot(id="f", title="Muitas", fields=FIELDS, responses=[snapshot_response(n, {}) for n in range(15)])
        self.assertEqual(len(build_report(form, NOW).recent_responses), 10)

    def test_raw_export(self):
        rows = exports.project(self.form, exports.RAW)
        self.assertEqual(rows[0], ["Response ID", "User Name", "User Email", "Submitted At", "Nome", "Idade", "Linhas", "Modo"])
        self.assertEqual(rows[1], ["r2", "User 2", "user2@example.com", NOW.isoformat(), "Bia", "", "A, C", "Metrô"])
        self.assertEqual(len(rows) - 1, build_report(self.form, NOW).total_responses)

    def test_analytics_export(self):
        with timezone.override(UTC):
            rows = exports.project(self.form, exports.ANALYTICS)
        self.assertEqual(rows[0][:5], ["Response ID", "User ID", "User Name", "User Email", "Submitted At"])
        self.assertEqual(rows[2][:5], ["r1", "u1", "User 1", "user1@example.com", "16/10/2026 12:00:00"])
        self.assertEqual(rows[2][5:], ["Ana", "31", "", ""])

    def test_missing_list_items_are_blank(self):
        self.assertEqual(exports.cell(["A", None]), "A, ")
        self.assertEqual(exports.cell([]), "")

    def test_csv_quotes_every_cell(self):
        text = exports.to_csv([["a", "b"], ["1", ""]])
        self.assertEqual(text, '"a","b"\n"1",""\n')

    def test_unknown_variant(self):
        with self.assertRaises(ValueError):
            exports.project(self.form, "xlsx")


class IdentityTests(SimpleTestCase):
    def test_str(self):
        self.assertEqual(str(Identity(user_id="42", role="ADMIN")), "ADMIN:42")


class AnalyticsApiTests(APITestCase):
    password = "Consulta#2026"

    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password=self.password, name="Admin", role=User.Role.ADMIN)
        self.citizens = [
            User.objects.create_user(email=f"c{n}@example.com", password=self.password, name=f"Cidadão {n}")
            for n in range(3)
        ]
        self.form = Form.objects.create(
            title="Orçamento participativo",
            created_by=self.admin,
            fields=[
                {"id": "field-1", "type": "number", "label": "Nota", "required": True},
                {"id": "field-2", "type": "checkbox", "label": "Prioridades", "options": ["Saúde", "Escola", "Praça"]},
                {"id": "field-3", "type": "divider", "label": ""},
            ],
        )
        now = timezone.now()
        answers = [
            {"field-1": 10, "field-2": ["Saúde", "Escola"]},
            {"field-1": "20", "field-2": ["Saúde"]},
            {"field-1": "abc", "field-2": ["Escola", "Praça"]},
        ]
        for n, (citizen, data) in enumerate(zip(self.citizens, answers)):
            FormResponse.objects.create(
                form=self.form,
                user=citizen,
                data=data,
                created_at=now - datetime.timedelta(minutes=10, seconds=n),
                submitted_at=now - datetime.timedelta(seconds=n),
            )

    def test_report_payload(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-analytics", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

        data = res.data
        self.assertEqual(data["formId"], str(self.form.pk))
        self.assertEqual(data["totalResponses"], 3)
        self.assertEqual(data["completionRate"], 100)
        self.assertEqual(data["averageCompletionTime"], 10)
        self.assertEqual(len(data["responseTrends"]), 7)
        self.assertEqual(data["responseTrends"][-1]["count"], 3)

        number, checkbox = data["fieldAnalytics"]
        self.assertEqual(number["fieldId"], "field-1")
        self.assertEqual(number["averageValue"], "15.00")
        self.assertEqual(number["completionRate"], 100.0)
        self.assertEqual(
            [(v["value"], v["percentage"]) for v in checkbox["topValues"]],
            [("Saúde", 40), ("Escola", 40), ("Praça", 20)],
        )
        self.assertEqual(data["recentResponses"][0]["userEmail"], "c0@example.com")

    def test_report_with_huge_number_answer(self):
        form = Form.objects.create(
            title="Valores",
            created_by=self.admin,
            fields=[{"id": "field-1", "type": "number", "label": "Valor"}],
        )
        FormResponse.objects.create(form=form, user=self.citizens[0], data={"field-1": "1e30"})
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-analytics", args=[form.pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["fieldAnalytics"][0]["averageValue"], f"{int(1e30)}.00")

    def test_citizen_is_forbidden(self):
        self.client.force_authenticate(self.citizens[0])
        res = self.client.get(reverse("form-analytics", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_form(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get("/api/v1/forms/00000000-0000-0000-0000-000000000000/analytics/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_analytics_csv_export(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-analytics-export", args=[self.form.pk]), HTTP_ACCEPT="application/json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res["Content-Type"].startswith("text/csv"))
        self.assertIn(f'form-analytics-{self.form.pk}.csv', res["Content-Disposition"])

        lines = res.content.decode("utf-8").splitlines()
        self.assertEqual(lines[0], '"Response ID","User ID","User Name","User Email","Submitted At","Nota","Prioridades"')
        self.assertEqual(len(lines) - 1, 3)
        self.assertTrue(lines[1].endswith('"10","Saúde, Escola"'))

    def test_raw_csv_export(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("form-responses-export", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn(f'form-responses-{self.form.pk}.csv', res["Content-Disposition"])
        lines = res.content.decode("utf-8").splitlines()
        self.assertEqual(lines[0], '"Response ID","User Name","User Email","Submitted At","Nota","Prioridades"')
        self.assertEqual(len(lines), 4)

    def test_raw_json_export(self):
        self.client.force_authenticate(self.admin)
        url = reverse("form-responses-export", args=[self.form.pk])
        res = self.client.get(f"{url}?format=json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 3)
        self.assertEqual(res.data[0]["user_email"], "c0@example.com")

    def test_export_requires_admin(self):
        self.client.force_authenticate(self.citizens[0])
        res = self.client.get(reverse("form-responses-export", args=[self.form.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

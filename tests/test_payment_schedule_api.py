"""
Tests — Payment schedule API.

Covers:
    - Create / list ordering / update / delete
    - Amount and percentage bounds
    - mark-paid with and without an explicit date
    - Summary totals and overdue detection
"""

from datetime import date, timedelta

import pytest

from lencondb.models import db
from lencondb.models.payment import PaymentSchedule
from lencondb.models.project import Project
from lencondb.services import payment_schedule_service


def _payment(project, **kw):
    data = {
        "project_id": project.id,
        "type": "MainPayment",
        "name": "Stage payment",
        "amount": 100000,
        "expected_date": date(2026, 6, 1),
    }
    data.update(kw)
    p = PaymentSchedule(**data)
    db.session.add(p)
    db.session.commit()
    return p


class TestPaymentCrud:
    def test_create(self, client, manager, project, auth_headers):
        res = client.post(
            "/api/v1/payment-schedule",
            json={
                "project_id": project.id,
                "type": "Advance",
                "name": "Advance 30%",
                "amount": "450000.50",
                "percentage": 30,
                "expected_date": "2026-02-15",
            },
            headers=auth_headers(manager),
        )
        assert res.status_code == 201
        data = res.get_json()
        assert data["amount"] == 450000.5
        assert data["percentage"] == 30
        assert data["is_paid"] is False
        assert data["project"]["id"] == project.id

    def test_employee_cannot_create(self, client, employee, project, auth_headers):
        res = client.post(
            "/api/v1/payment-schedule",
            json={"project_id": project.id, "type": "Advance", "name": "A",
                  "amount": 1, "expected_date": "2026-02-15"},
            headers=auth_headers(employee),
        )
        assert res.status_code == 403

    @pytest.mark.parametrize("field,value", [("amount", -1), ("percentage", 120)])
    def test_out_of_range_values(self, client, manager, project, auth_headers, field, value):
        body = {"project_id": project.id, "type": "Advance", "name": "A",
                "amount": 10, "expected_date": "2026-02-15", field: value}
        res = client.post("/api/v1/payment-schedule", json=body, headers=auth_headers(manager))
        assert res.status_code == 422

    def test_non_numeric_amount(self, client, manager, project, auth_headers):
        body = {"project_id": project.id, "type": "Advance", "name": "A",
                "amount": "lots", "expected_date": "2026-02-15"}
        res = client.post("/api/v1/payment-schedule", json=body, headers=auth_headers(manager))
        assert res.status_code == 400

    @pytest.mark.parametrize("value,expected", [("false", False), ("0", False), (False, False),
                                                ("true", True), (True, True)])
    def test_is_paid_parsing(self, client, manager, project, auth_headers, value, expected):
        body = {"project_id": project.id, "type": "Advance", "name": "A",
                "amount": 10, "expected_date": "2026-02-15", "is_paid": value}
        res = client.post("/api/v1/payment-schedule", json=body, headers=auth_headers(manager))
        assert res.status_code == 201
        assert res.get_json()["is_paid"] is expected

    @pytest.mark.parametrize("field,value", [("is_paid", "maybe"), ("is_paid", [True]),
                                             ("name", 42), ("description", {"text": "x"})])
    def test_malformed_fields_are_400(self, client, manager, project, auth_headers, field, value):
        body = {"project_id": project.id, "type": "Advance", "name": "A",
                "amount": 10, "expected_date": "2026-02-15", field: value}
        res = client.post("/api/v1/payment-schedule", json=body, headers=auth_headers(manager))
        assert res.status_code == 400
        assert PaymentSchedule.query.count() == 0

    def test_list_ordered_by_expected_date(self, client, employee, project, assign, auth_headers):
        assign(project, employee)
        _payment(project, name="Final", expected_date=date(2026, 12, 1))
        _payment(project, name="Advance", expected_date=date(2026, 1, 15))
        res = client.get(
            f"/api/v1/payment-schedule?project_id={project.id}", headers=auth_headers(employee),
        )
        assert [p["name"] for p in res.get_json()] == ["Advance", "Final"]

    def test_update_and_delete(self, client, manager, project, auth_headers):
        p = _payment(project)
        headers = auth_headers(manager)
        res = client.patch(
            f"/api/v1/payment-schedule/{p.id}", json={"description": "Per addendum 2"},
            headers=headers,
        )
        assert res.get_json()["description"] == "Per addendum 2"
        assert client.delete(f"/api/v1/payment-schedule/{p.id}", headers=headers).status_code == 200
        assert client.get(f"/api/v1/payment-schedule/{p.id}", headers=headers).status_code == 404


class TestMarkPaid:
    def test_mark_paid_with_date(self, client, manager, project, auth_headers):
        p = _payment(project)
        res = client.patch(
            f"/api/v1/payment-schedule/{p.id}/mark-paid", json={"actual_date": "2026-06-03"},
            headers=auth_headers(manager),
        )
        assert res.status_code == 200
        data = res.get_json()
        assert data["is_paid"] is True
        assert data["actual_date"] == "2026-06-03"

    def test_mark_paid_defaults_to_today(self, client, manager, project, auth_headers):
        p = _payment(project)
        res = client.patch(f"/api/v1/payment-schedule/{p.id}/mark-paid", headers=auth_headers(manager))
        assert res.get_json()["actual_date"] == date.today().isoformat()


class TestSummary:
    def test_summary_totals(self, project):
        today = date(2026, 7, 1)
        _payment(project, amount=100, expected_date=today - timedelta(days=10), is_paid=True)
        _payment(project, amount=250, expected_date=today - timedelta(days=1))
        _payment(project, amount=400, expected_date=today + timedelta(days=30))

        summary = payment_schedule_service.payment_summary(project.id, today=today)
        assert summary["payment_count"] == 3
        assert summary["total_planned"] == 750
        assert summary["total_paid"] == 100
        assert summary["total_outstanding"] == 650
        assert summary["overdue_count"] == 1
        assert summary["overdue_amount"] == 250

    def test_summary_endpoint(self, client, employee, project, assign, auth_headers):
        assign(project, employee)
        _payment(project, amount=500)
        res = client.get(
            f"/api/v1/payment-schedule/summary?project_id={project.id}",
            headers=auth_headers(employee),
        )
        assert res.status_code == 200
        assert res.get_json()["total_planned"] == 500


class TestPaymentVisibility:
    def test_unassigned_employee_is_refused(self, client, employee, project, auth_headers):
        p = _payment(project)
        headers = auth_headers(employee)
        for url in (
            f"/api/v1/payment-schedule?project_id={project.id}",
            f"/api/v1/payment-schedule/summary?project_id={project.id}",
            f"/api/v1/payment-schedule/{p.id}",
        ):
            assert client.get(url, headers=headers).status_code == 403, url

    def test_unscoped_reads_cover_assigned_projects_only(self, client, employee, manager, project,
                                                         customer, assign, auth_headers):
        other = Project(
            name="Harbour Offices", contract_date=date(2026, 2, 1),
            expiration_date=date(2026, 11, 30), customer_id=customer.id, manager_id=manager.id,
        )
        db.session.add(other)
        db.session.commit()
        _payment(project, name="Ours", amount=100)
        _payment(other, name="Theirs", amount=900)
        assign(project, employee)
        headers = auth_headers(employee)

        listed = client.get("/api/v1/payment-schedule", headers=headers).get_json()
        assert [p["name"] for p in listed] == ["Ours"]
        summary = client.get("/api/v1/payment-schedule/summary", headers=headers).get_json()
        assert summary["total_planned"] == 100

        everything = client.get("/api/v1/payment-schedule/summary", headers=auth_headers(manager))
        assert everything.get_json()["total_planned"] == 1000

"""
Tests — Workload plan and workload actual APIs.

Covers:
    - Plans: create, past-date rejection, one plan per user and day,
      creator-or-Admin edits, calendar grouping
    - Actuals: submission by the caller, hours bounds, one entry per day,
      distributions never exceeding hours worked, ownership checks
"""

from datetime import date, timedelta

import pytest

from lencondb.models import db
from lencondb.models.workload import WorkloadActual, WorkloadPlan

TOMORROW = date.today() + timedelta(days=1)
YESTERDAY = date.today() - timedelta(days=1)


def _plan(user, project, manager, day=TOMORROW):
    plan = WorkloadPlan(user_id=user.id, project_id=project.id, manager_id=manager.id, date=day)
    db.session.add(plan)
    db.session.commit()
    return plan


# ═════════════════════════════════════════════════════════════════════════════
# PLANS
# ═════════════════════════════════════════════════════════════════════════════


class TestWorkloadPlan:
    def test_create_plan(self, client, manager, employee, project, auth_headers):
        res = client.post(
            "/api/v1/workload-plan",
            json={"user_id": employee.id, "project_id": project.id, "date": TOMORROW.isoformat()},
            headers=auth_headers(manager),
        )
        assert res.status_code == 201
        data = res.get_json()
        assert data["manager_id"] == manager.id
        assert data["user"]["id"] == employee.id

    def test_past_date_rejected(self, client, manager, employee, project, auth_headers):
        res = client.post(
            "/api/v1/workload-plan",
            json={"user_id": employee.id, "project_id": project.id, "date": YESTERDAY.isoformat()},
            headers=auth_headers(manager),
        )
        assert res.status_code == 400

    def test_one_plan_per_user_and_day(self, client, manager, employee, project, auth_headers):
        _plan(employee, project, manager)
        res = client.post(
            "/api/v1/workload-plan",
            json={"user_id": employee.id, "project_id": project.id, "date": TOMORROW.isoformat()},
            headers=auth_headers(manager),
        )
        assert res.status_code == 409

    def test_employee_cannot_plan(self, client, employee, project, auth_headers):
        res = client.post(
            "/api/v1/workload-plan",
            json={"user_id": employee.id, "project_id": project.id, "date": TOMORROW.isoformat()},
            headers=auth_headers(employee),
        )
        assert res.status_code == 403

    def test_only_creator_or_admin_may_change(self, client, manager, make_user, admin, employee,
                                              project, auth_headers):
        plan = _plan(employee, project, manager)
        other_manager = make_user("Manager")
        later = (TOMORROW + timedelta(days=1)).isoformat()

        res = client.patch(
            f"/api/v1/workload-plan/{plan.id}", json={"date": later},
            headers=auth_headers(other_manager),
        )
        assert res.status_code == 403

        res = client.patch(
            f"/api/v1/workload-plan/{plan.id}", json={"date": later}, headers=auth_headers(admin),
        )
        assert res.status_code == 200
        assert res.get_json()["date"] == later

        res = client.delete(f"/api/v1/workload-plan/{plan.id}", headers=auth_headers(manager))
        assert res.status_code == 200

    def test_past_plan_is_frozen(self, client, manager, employee, project, auth_headers):
        plan = _plan(employee, project, manager, day=YESTERDAY)
        res = client.delete(f"/api/v1/workload-plan/{plan.id}", headers=auth_headers(manager))
        assert res.status_code == 400

    def test_filters_and_calendar(self, client, manager, employee, make_user, project, auth_headers):
        second = make_user("Employee")
        _plan(employee, project, manager)
        _plan(second, project, manager)
        _plan(employee, project, manager, day=TOMORROW + timedelta(days=7))
        headers = auth_headers(manager)

        res = client.get(
            f"/api/v1/workload-plan?user_id={employee.id}"
            f"&start_date={TOMORROW.isoformat()}&end_date={TOMORROW.isoformat()}",
            headers=headers,
        )
        assert len(res.get_json()) == 1

        calendar = client.get(
            f"/api/v1/workload-plan/calendar?project_id={project.id}", headers=headers,
        ).get_json()
        assert len(calendar[TOMORROW.isoformat()]) == 2

    def test_bad_filter_date(self, client, manager, auth_headers):
        res = client.get("/api/v1/workload-plan?start_date=tomorrow", headers=auth_headers(manager))
        assert res.status_code == 400


# ═════════════════════════════════════════════════════════════════════════════
# ACTUALS
# ═════════════════════════════════════════════════════════════════════════════


class TestWorkloadActual:
    def _submit(self, client, user, auth_headers, **kw):
        body = {"date": date.today().isoformat(), "hours_worked": 8}
        body.update(kw)
        return client.post("/api/v1/workload-actual", json=body, headers=auth_headers(user))

    def test_submit_with_distribution(self, client, employee, project, auth_headers):
        res = self._submit(
            client, employee, auth_headers,
            distributions=[{"project_id": project.id, "hours": 6, "description": "Formwork"}],
        )
        assert res.status_code == 201
        data = res.get_json()
        assert data["user_id"] == employee.id
        assert data["distributions"][0]["hours"] == 6

    def test_trial_cannot_submit(self, client, trial, auth_headers):
        assert self._submit(client, trial, auth_headers).status_code == 403

    @pytest.mark.parametrize("hours", [0, -2, 24.5])
    def test_hours_bounds(self, client, employee, auth_headers, hours):
        assert self._submit(client, employee, auth_headers, hours_worked=hours).status_code == 422

    def test_one_entry_per_day(self, client, employee, auth_headers):
        assert self._submit(client, employee, auth_headers).status_code == 201
        assert self._submit(client, employee, auth_headers).status_code == 409

    def test_distribution_cannot_exceed_hours(self, client, employee, project, auth_headers):
        res = self._submit(
            client, employee, auth_headers, hours_worked=4,
            distributions=[{"project_id": project.id, "hours": 3},
                           {"project_id": project.id, "hours": 2}],
        )
        assert res.status_code == 422
        assert WorkloadActual.query.count() == 0

    def test_add_and_remove_distribution(self, client, employee, project, auth_headers):
        headers = auth_headers(employee)
        actual = self._submit(client, employee, auth_headers, hours_worked=8).get_json()

        res = client.post(
            f"/api/v1/workload-actual/{actual['id']}/distribution",
            json={"project_id": project.id, "hours": 5}, headers=headers,
        )
        assert res.status_code == 201
        dist_id = res.get_json()["id"]

        over = client.post(
            f"/api/v1/workload-actual/{actual['id']}/distribution",
            json={"project_id": project.id, "hours": 4}, headers=headers,
        )
        assert over.status_code == 422

        res = client.delete(f"/api/v1/workload-actual/distribution/{dist_id}", headers=headers)
        assert res.status_code == 200
        entry = client.get(f"/api/v1/workload-actual/{actual['id']}", headers=headers).get_json()
        assert entry["distributions"] == []

    def test_cannot_shrink_below_distributed(self, client, employee, project, auth_headers):
        actual = self._submit(
            client, employee, auth_headers,
            distributions=[{"project_id": project.id, "hours": 6}],
        ).get_json()
        res = client.patch(
            f"/api/v1/workload-actual/{actual['id']}", json={"hours_worked": 5},
            headers=auth_headers(employee),
        )
        assert res.status_code == 422

    def test_other_employee_cannot_modify(self, client, employee, make_user, manager, auth_headers):
        actual = self._submit(client, employee, auth_headers).get_json()
        colleague = make_user("Employee")

        res = client.patch(
            f"/api/v1/workload-actual/{actual['id']}", json={"user_text": "edited"},
            headers=auth_headers(colleague),
        )
        assert res.status_code == 403

        res = client.patch(
            f"/api/v1/workload-actual/{actual['id']}", json={"user_text": "checked"},
            headers=auth_headers(manager),
        )
        assert res.status_code == 200
        assert res.get_json()["user_text"] == "checked"

    def test_my_and_by_date(self, client, employee, auth_headers):
        headers = auth_headers(employee)
        earlier = date.today() - timedelta(days=2)
        self._submit(client, employee, auth_headers)
        self._submit(client, employee, auth_headers, date=earlier.isoformat(), hours_worked=6)

        mine = client.get("/api/v1/workload-actual/my", headers=headers).get_json()
        assert [a["date"] for a in mine] == [earlier.isoformat(), date.today().isoformat()]

        listed = client.get(f"/api/v1/workload-actual?user_id={employee.id}", headers=headers)
        assert [a["date"] for a in listed.get_json()] == [
            date.today().isoformat(), earlier.isoformat(),
        ]

        day = client.get(f"/api/v1/workload-actual/date/{earlier.isoformat()}", headers=headers)
        assert day.get_json()["hours_worked"] == 6
        empty = client.get(f"/api/v1/workload-actual/date/{YESTERDAY.isoformat()}", headers=headers)
        assert empty.status_code == 200
        assert empty.get_json() is None

"""
Tests — Project API.

Covers:
    - Create / read / update / delete with role guards
    - Date, customer and manager validation
    - Visibility: Employee and Trial see assigned projects only
    - Team membership and workload views
"""

from datetime import date, timedelta

import pytest

from lencondb.models import db
from lencondb.models.construction import Construction
from lencondb.models.payment import PaymentSchedule
from lencondb.models.project import Project, ProjectUser
from lencondb.models.workload import WorkloadPlan


@pytest.fixture()
def payload(customer, manager):
    return {
        "name": "Northern Bridge",
        "contract_date": "2026-03-01",
        "expiration_date": "2027-02-28",
        "customer_id": customer.id,
        "manager_id": manager.id,
    }


class TestCreateProject:
    def test_manager_creates_and_reads_back(self, client, manager, payload, auth_headers):
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 201
        created = res.get_json()
        assert created["type"] == "main"
        assert created["status"] == "Active"
        assert created["customer"]["name"] == "Stroy Invest"

        res = client.get(f"/api/v1/project/{created['id']}", headers=auth_headers(manager))
        assert res.status_code == 200
        detail = res.get_json()
        assert detail["name"] == "Northern Bridge"
        assert detail["contract_date"] == "2026-03-01"
        assert detail["constructions"] == []
        assert detail["payment_schedule_count"] == 0

    def test_employee_cannot_create(self, client, employee, payload, auth_headers):
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(employee))
        assert res.status_code == 403

    def test_trial_cannot_create(self, client, trial, payload, auth_headers):
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(trial))
        assert res.status_code == 403

    def test_trial_cannot_update_or_delete(self, client, trial, project, assign, auth_headers):
        assign(project, trial)
        headers = auth_headers(trial)
        assert client.get(f"/api/v1/project/{project.id}", headers=headers).status_code == 200

        res = client.patch(f"/api/v1/project/{project.id}", json={"name": "Renamed"}, headers=headers)
        assert res.status_code == 403
        assert client.delete(f"/api/v1/project/{project.id}", headers=headers).status_code == 403
        assert db.session.get(Project, project.id).name == "Riverside Residential"

    def test_missing_fields(self, client, manager, auth_headers):
        res = client.post("/api/v1/project", json={"name": "X"}, headers=auth_headers(manager))
        assert res.status_code == 400
        assert set(res.get_json()["details"]["missing"]) == {
            "contract_date", "expiration_date", "customer_id", "manager_id",
        }

    def test_expiration_before_contract(self, client, manager, payload, auth_headers):
        payload["expiration_date"] = "2026-02-01"
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 422

    def test_malformed_date(self, client, manager, payload, auth_headers):
        payload["contract_date"] = "2026-13-45"
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 400

    def test_non_string_name(self, client, manager, payload, auth_headers):
        payload["name"] = 2026
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 400

    def test_contractor_as_customer_rejected(self, client, manager, contractor, payload, auth_headers):
        payload["customer_id"] = contractor.id
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 422

    def test_employee_as_manager_rejected(self, client, manager, employee, payload, auth_headers):
        payload["manager_id"] = employee.id
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 422

    def test_additional_project_links_main(self, client, manager, project, payload, auth_headers):
        payload.update(type="additional", main_project_id=project.id)
        res = client.post("/api/v1/project", json=payload, headers=auth_headers(manager))
        assert res.status_code == 201
        assert res.get_json()["main_project"]["id"] == project.id

        main = client.get(f"/api/v1/project/{project.id}", headers=auth_headers(manager)).get_json()
        assert [p["name"] for p in main["additional_projects"]] == ["Northern Bridge"]


class TestVisibility:
    def test_manager_sees_all(self, client, manager, project, auth_headers):
        res = client.get("/api/v1/project", headers=auth_headers(manager))
        assert [p["id"] for p in res.get_json()] == [project.id]

    def test_employee_sees_only_assigned(self, client, employee, project, assign, auth_headers):
        assert client.get("/api/v1/project", headers=auth_headers(employee)).get_json() == []

        assign(project, employee)
        res = client.get("/api/v1/project", headers=auth_headers(employee))
        assert [p["id"] for p in res.get_json()] == [project.id]

    def test_trial_unassigned_project_is_forbidden(self, client, trial, project, auth_headers):
        res = client.get(f"/api/v1/project/{project.id}", headers=auth_headers(trial))
        assert res.status_code == 403

    def test_trial_assigned_project_is_visible(self, client, trial, project, assign, auth_headers):
        assign(project, trial)
        res = client.get(f"/api/v1/project/{project.id}", headers=auth_headers(trial))
        assert res.status_code == 200

    def test_status_filter(self, client, manager, project, auth_headers):
        res = client.get("/api/v1/project?status=Completed", headers=auth_headers(manager))
        assert res.get_json() == []
        res = client.get("/api/v1/project?status=Paused", headers=auth_headers(manager))
        assert res.status_code == 400


class TestUpdateDelete:
    def test_update_status(self, client, manager, project, auth_headers):
        res = client.patch(
            f"/api/v1/project/{project.id}", json={"status": "Completed"},
            headers=auth_headers(manager),
        )
        assert res.status_code == 200
        assert res.get_json()["status"] == "Completed"

    def test_project_cannot_be_own_main(self, client, manager, project, auth_headers):
        res = client.patch(
            f"/api/v1/project/{project.id}", json={"main_project_id": project.id},
            headers=auth_headers(manager),
        )
        assert res.status_code == 422

    def test_manager_cannot_delete(self, client, manager, project, auth_headers):
        res = client.delete(f"/api/v1/project/{project.id}", headers=auth_headers(manager))
        assert res.status_code == 403

    def test_admin_delete_cascades(self, client, admin, employee, project, assign, auth_headers):
        assign(project, employee)
        db.session.add(Construction(name="Block A", project_id=project.id))
        db.session.add(PaymentSchedule(
            project_id=project.id, type="Advance", name="Advance 30%",
            amount=300000, expected_date=date(2026, 2, 1),
        ))
        db.session.commit()
        project_id = project.id

        res = client.delete(f"/api/v1/project/{project_id}", headers=auth_headers(admin))
        assert res.status_code == 200
        db.session.expire_all()
        assert db.session.get(Project, project_id) is None
        assert Construction.query.filter_by(project_id=project_id).count() == 0
        assert PaymentSchedule.query.filter_by(project_id=project_id).count() == 0
        assert ProjectUser.query.filter_by(project_id=project_id).count() == 0


class TestTeam:
    def test_add_user_is_idempotent(self, client, manager, employee, project, auth_headers):
        url = f"/api/v1/project/{project.id}/users/{employee.id}"
        first = client.post(url, headers=auth_headers(manager))
        assert first.status_code == 201
        again = client.post(url, headers=auth_headers(manager))
        assert again.status_code == 200
        assert ProjectUser.query.filter_by(project_id=project.id).count() == 1

    def test_list_team_and_available(self, client, manager, employee, project, assign, auth_headers):
        assign(project, employee)
        team = client.get(f"/api/v1/project/{project.id}/users", headers=auth_headers(manager))
        assert [u["id"] for u in team.get_json()] == [employee.id]

        available = client.get(
            f"/api/v1/project/{project.id}/available-users", headers=auth_headers(manager),
        ).get_json()
        ids = {u["id"] for u in available}
        assert employee.id not in ids
        assert manager.id in ids

    def test_remove_user(self, client, manager, employee, project, assign, auth_headers):
        assign(project, employee)
        url = f"/api/v1/project/{project.id}/users/{employee.id}"
        assert client.delete(url, headers=auth_headers(manager)).status_code == 200
        assert client.delete(url, headers=auth_headers(manager)).status_code == 404

    def test_team_workload(self, client, manager, employee, project, assign, auth_headers):
        assign(project, employee)
        day = date.today() + timedelta(days=3)
        db.session.add(WorkloadPlan(
            user_id=employee.id, project_id=project.id, manager_id=manager.id, date=day,
        ))
        db.session.commit()

        res = client.get(
            f"/api/v1/project/{project.id}/workload/employees", headers=auth_headers(manager),
        )
        assert res.status_code == 200
        rows = res.get_json()
        assert rows[0]["id"] == employee.id
        assert rows[0]["workload_plans"][0]["date"] == day.isoformat()

        res = client.get(
            f"/api/v1/project/{project.id}/workload/employees/{employee.id}",
            headers=auth_headers(manager),
        )
        assert [p["date"] for p in res.get_json()] == [day.isoformat()]

"""
Tests — Company API.

Covers:
    - Admin-only writes, open reads
    - Type filter and validation
    - Delete refused while projects reference the company
"""

import pytest

from lencondb.models import db
from lencondb.models.company import Company


class TestCompanyCrud:
    def test_admin_creates_company(self, client, admin, auth_headers):
        res = client.post(
            "/api/v1/company",
            json={"name": "  Mostotrest ", "type": "Contractor", "email": "Office@Example.com"},
            headers=auth_headers(admin),
        )
        assert res.status_code == 201
        data = res.get_json()
        assert data["name"] == "Mostotrest"
        assert data["email"] == "office@example.com"
        assert data["project_count"] == 0

    def test_create_alias_route(self, client, admin, auth_headers):
        res = client.post(
            "/api/v1/company/create", json={"name": "Alias Co", "type": "Customer"},
            headers=auth_headers(admin),
        )
        assert res.status_code == 201

    def test_manager_cannot_create(self, client, manager, auth_headers):
        res = client.post(
            "/api/v1/company", json={"name": "X", "type": "Customer"}, headers=auth_headers(manager),
        )
        assert res.status_code == 403

    def test_invalid_type(self, client, admin, auth_headers):
        res = client.post(
            "/api/v1/company", json={"name": "X", "type": "Supplier"}, headers=auth_headers(admin),
        )
        assert res.status_code == 422

    def test_list_filtered_by_type(self, client, employee, customer, contractor, auth_headers):
        res = client.get("/api/v1/company?type=Contractor", headers=auth_headers(employee))
        assert res.status_code == 200
        assert [c["name"] for c in res.get_json()] == ["Beton Service"]

    def test_list_bad_type_filter(self, client, employee, auth_headers):
        res = client.get("/api/v1/company?type=Nope", headers=auth_headers(employee))
        assert res.status_code == 400

    def test_get_includes_projects(self, client, employee, customer, project, auth_headers):
        res = client.get(f"/api/v1/company/{customer.id}", headers=auth_headers(employee))
        assert res.status_code == 200
        data = res.get_json()
        assert data["project_count"] == 1
        assert data["projects"][0]["id"] == project.id

    def test_get_unknown(self, client, employee, auth_headers):
        res = client.get("/api/v1/company/does-not-exist", headers=auth_headers(employee))
        assert res.status_code == 404

    def test_update(self, client, admin, customer, auth_headers):
        res = client.patch(
            f"/api/v1/company/{customer.id}", json={"bank": "Sberbank", "kpp": "770101001"},
            headers=auth_headers(admin),
        )
        assert res.status_code == 200
        assert res.get_json()["bank"] == "Sberbank"

    @pytest.mark.parametrize("body", [
        {"name": 123, "type": "Customer"},
        {"name": ["Mostotrest"], "type": "Customer"},
        {"name": "Mostotrest", "type": "Customer", "inn": 7701234567},
    ])
    def test_non_string_fields_are_400(self, client, admin, auth_headers, body):
        res = client.post("/api/v1/company", json=body, headers=auth_headers(admin))
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"
        assert Company.query.count() == 0


class TestCompanyDelete:
    def test_delete_unused_company(self, client, admin, contractor, auth_headers):
        res = client.delete(f"/api/v1/company/{contractor.id}", headers=auth_headers(admin))
        assert res.status_code == 200
        assert db.session.get(Company, contractor.id) is None

    def test_delete_with_projects_is_conflict(self, client, admin, customer, project, auth_headers):
        res = client.delete(f"/api/v1/company/{customer.id}", headers=auth_headers(admin))
        assert res.status_code == 409
        assert res.get_json()["error"] == "Company has 1 linked project(s)"
        assert db.session.get(Company, customer.id) is not None

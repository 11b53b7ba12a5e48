"""
Tests — Construction API.
"""

from lencondb.models import db
from lencondb.models.construction import Construction
from lencondb.models.document import Document
from lencondb.models.project import Project


def _construction(project, name="Block A"):
    c = Construction(name=name, project_id=project.id)
    db.session.add(c)
    db.session.commit()
    return c


class TestConstruction:
    def test_create(self, client, manager, project, auth_headers):
        res = client.post(
            "/api/v1/construction", json={"name": "Block B", "project_id": project.id},
            headers=auth_headers(manager),
        )
        assert res.status_code == 201
        assert res.get_json()["project"]["id"] == project.id

    def test_blank_name(self, client, manager, project, auth_headers):
        res = client.post(
            "/api/v1/construction", json={"name": "  ", "project_id": project.id},
            headers=auth_headers(manager),
        )
        assert res.status_code == 400

    def test_non_string_name(self, client, manager, project, auth_headers):
        res = client.post(
            "/api/v1/construction", json={"name": {"en": "Block B"}, "project_id": project.id},
            headers=auth_headers(manager),
        )
        assert res.status_code == 400
        assert Construction.query.count() == 0

    def test_unknown_project(self, client, manager, auth_headers):
        res = client.post(
            "/api/v1/construction", json={"name": "Block B", "project_id": "nope"},
            headers=auth_headers(manager),
        )
        assert res.status_code == 404

    def test_read_guards(self, client, employee, trial, project, assign, auth_headers):
        c = _construction(project)
        assert client.get("/api/v1/construction", headers=auth_headers(employee)).status_code == 403

        url = f"/api/v1/construction?project_id={project.id}"
        assert client.get(url, headers=auth_headers(trial)).status_code == 403
        assert client.get(f"/api/v1/construction/{c.id}", headers=auth_headers(trial)).status_code == 403
        assert client.get("/api/v1/construction", headers=auth_headers(trial)).get_json() == []

        assign(project, trial)
        res = client.get(url, headers=auth_headers(trial))
        assert [row["name"] for row in res.get_json()] == ["Block A"]

    def test_move_unlinks_documents(self, client, manager, project, customer, auth_headers):
        c = _construction(project)
        doc = Document(
            project_id=project.id, construction_id=c.id, type="contract",
            original_name="plan.pdf", path="a1b2c3.pdf", hash_name="a1b2c3.pdf",
        )
        other = Project(
            name="Harbour Offices", customer_id=customer.id, manager_id=manager.id,
            contract_date=project.contract_date, expiration_date=project.expiration_date,
        )
        db.session.add_all([doc, other])
        db.session.commit()

        res = client.patch(
            f"/api/v1/construction/{c.id}", json={"project_id": other.id},
            headers=auth_headers(manager),
        )
        assert res.status_code == 200
        assert res.get_json()["project_id"] == other.id
        db.session.refresh(doc)
        assert doc.construction_id is None
        assert doc.project_id == project.id

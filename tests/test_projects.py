"""Tests for showcase projects."""

from datetime import datetime

from autologic.domain.projects.schemas import completion_percentage, project_duration, total_parts_cost

from .conftest import auth_headers


def project_payload(service_id, **overrides):
    payload = {
        "name": "Engine Rebuild",
        "nameAr": "إعادة بناء المحرك",
        "description": "Full rebuild of a V6",
        "descriptionAr": "إعادة بناء كاملة لمحرك V6",
        "service": service_id,
        "client": {"name": "Fahad", "email": "fahad@example.com", "phone": "+966540001111"},
        "car": {"make": "Nissan", "model": "Patrol", "year": 2015, "licensePlate": "abc 123"},
        "estimatedDuration": 40,
        "cost": {"estimated": 8000, "labor": 3000},
        "parts": [
            {"name": "Piston", "quantity": 6, "unitPrice": 250, "warranty": 12},
            {"name": "Gasket kit", "quantity": 1, "unitPrice": 400},
        ],
        "images": [{"url": "https://cdn/x.jpg", "publicId": "autologic/projects/x.jpg", "type": "before"}],
        "tags": ["engine"],
    }
    payload.update(overrides)
    return payload


def create_project(client, admin, service, **overrides):
    resp = client.post("/api/projects", json=project_payload(service.id, **overrides), headers=auth_headers(admin))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["project"]


class TestDerivedValues:
    def test_total_parts_cost(self):
        assert total_parts_cost([{"quantity": 2, "unitPrice": 10.5}, {"quantity": 1, "unitPrice": 4}]) == 25
        assert total_parts_cost(None) == 0

    def test_duration_rounds_up_to_days(self):
        assert project_duration(datetime(2030, 1, 1), datetime(2030, 1, 2, 1)) == 2
        assert project_duration(datetime(2030, 1, 1), None) is None

    def test_completion_percentage(self):
        assert completion_percentage("completed") == 100
        assert completion_percentage("pending") == 0
        assert completion_percentage("in-progress") == 50
        assert completion_percentage("in-progress", 10, 40) == 25
        assert completion_percentage("in-progress", 50, 40) == 90


class TestProjectsApi:
    def test_admin_creates_project(self, client, admin, service):
        project = create_project(client, admin, service)
        assert project["totalPartsCost"] == 1900
        assert project["car"]["licensePlate"] == "ABC 123"
        assert project["client"]["email"] == "fahad@example.com"
        assert project["service"]["id"] == service.id

    def test_unknown_service(self, client, admin):
        resp = client.post("/api/projects", json=project_payload(999), headers=auth_headers(admin))
        assert resp.status_code == 404

    def test_invalid_image_stage(self, client, admin, service):
        payload = project_payload(service.id, images=[{"url": "u", "publicId": "p", "type": "someday"}])
        resp = client.post("/api/projects", json=payload, headers=auth_headers(admin))
        assert resp.status_code == 400

    def test_public_view_hides_client(self, client, admin, service):
        project = create_project(client, admin, service)
        public = client.get(f"/api/projects/{project['id']}").json()["data"]["project"]
        assert "client" not in public
        assert public["name"] == "Engine Rebuild"

    def test_private_projects_are_hidden(self, client, admin, service):
        private = create_project(client, admin, service, isPublic=False)
        create_project(client, admin, service, name="Public job")
        assert client.get("/api/projects").json()["total"] == 1
        assert client.get(f"/api/projects/{private['id']}").status_code == 404
        assert client.get("/api/projects", headers=auth_headers(admin)).json()["total"] == 2

    def test_featured_and_by_service(self, client, admin, service):
        create_project(client, admin, service, featured=True)
        create_project(client, admin, service, name="Other")
        assert client.get("/api/projects/featured/list").json()["results"] == 1
        assert client.get(f"/api/projects/service/{service.id}").json()["total"] == 2

    def test_status_completed_sets_end_date(self, client, admin, service):
        project = create_project(client, admin, service)
        resp = client.put(
            f"/api/projects/{project['id']}/status", json={"status": "completed"}, headers=auth_headers(admin)
        )
        data = resp.json()["data"]["project"]
        assert data["endDate"] is not None
        assert data["completionPercentage"] == 100
        assert data["projectDuration"] is not None

    def test_assign_and_note(self, client, admin, technician, customer, service):
        project = create_project(client, admin, service)
        assigned = client.put(
            f"/api/projects/{project['id']}/assign", json={"technician": technician.id}, headers=auth_headers(admin)
        )
        assert assigned.json()["data"]["project"]["technician"]["id"] == technician.id

        noted = client.post(
            f"/api/projects/{project['id']}/notes",
            json={"text": "Head gasket replaced", "textAr": "تم تغيير الجوان", "isInternal": True},
            headers=auth_headers(technician),
        )
        assert noted.status_code == 201
        assert len(noted.json()["data"]["project"]["notes"]) == 1

        public = client.get(f"/api/projects/{project['id']}").json()["data"]["project"]
        assert public["notes"] == []

        forbidden = client.post(
            f"/api/projects/{project['id']}/notes",
            json={"text": "hi", "textAr": "مرحبا"},
            headers=auth_headers(customer),
        )
        assert forbidden.status_code == 403

    def test_update_and_delete(self, client, admin, service, r2):
        project = create_project(client, admin, service)
        updated = client.put(
            f"/api/projects/{project['id']}", json={"name": "V6 Rebuild"}, headers=auth_headers(admin)
        )
        assert updated.json()["data"]["project"]["name"] == "V6 Rebuild"

        resp = client.delete(f"/api/projects/{project['id']}", headers=auth_headers(admin))
        assert resp.status_code == 204
        assert "autologic/projects/x.jpg" in r2.deleted

    def test_remove_image(self, client, admin, service, r2):
        project = create_project(client, admin, service)
        resp = client.delete(
            f"/api/projects/{project['id']}/images/autologic/projects/x.jpg", headers=auth_headers(admin)
        )
        assert resp.json()["data"]["project"]["images"] == []
        missing = client.delete(
            f"/api/projects/{project['id']}/images/autologic/projects/x.jpg", headers=auth_headers(admin)
        )
        assert missing.status_code == 404

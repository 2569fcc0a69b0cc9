# ruff: noqa

from datetime import date
from uuid import uuid4

from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.errors import InternalError
from app.main import create_app
from factories import make_assignment, make_config, make_project, make_resource, make_skill


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_create_assignment_round_trip(client, session):
    resource = make_resource(session)
    project = make_project(session)
    other = make_project(session, code="PRJ-OTHER")
    make_assignment(session, other, resource, date=date(2026, 3, 5), hours=5)
    body = {
        "projectId": str(project.id),
        "resourceId": str(resource.id),
        "title": "Build interfaces",
        "date": "2026-03-05",
        "hours": 3,
    }

    resp = client.post("/assignments", json=body)

    assert resp.status_code == 201
    payload = resp.json()
    assert payload["success"] is True
    data = payload["data"]
    assert data["projectId"] == str(project.id)
    assert data["month"] == 3
    assert data["year"] == 2026
    assert data["project"] == {"id": str(project.id), "code": "PRJ-1", "title": "Migration"}
    assert data["resource"]["code"] == resource.code


def test_create_assignment_over_capacity_is_conflict(client, session):
    resource = make_resource(session)
    project = make_project(session)
    body = {
        "projectId": str(project.id),
        "resourceId": str(resource.id),
        "title": "Too much",
        "date": "2026-03-05",
        "hours": 9,
    }

    resp = client.post("/assignments", json=body)

    assert resp.status_code == 409
    error = resp.json()["error"]
    assert resp.json()["success"] is False
    assert error["code"] == "DAILY_CAPACITY_EXCEEDED"
    assert error["message"].startswith("Assignment would exceed daily resource capacity for 2026-03-05.")
    assert client.get("/assignments").json()["data"]["count"] == 0


def test_create_assignment_errors_map_to_statuses(client, session):
    inactive = make_resource(session, active=False)
    project = make_project(session)

    missing = client.post("/assignments", json={"title": "x", "hours": 1, "date": "2026-03-05"})
    assert missing.status_code == 400
    assert missing.json()["error"] == {"message": "projectId is required", "code": "BAD_REQUEST", "details": None}

    unknown = client.post(
        "/assignments", json={"projectId": str(uuid4()), "title": "x", "hours": 1, "date": "2026-03-05"}
    )
    assert unknown.status_code == 404
    assert unknown.json()["error"]["code"] == "NOT_FOUND"

    rejected = client.post(
        "/assignments",
        json={
            "projectId": str(project.id),
            "resourceId": str(inactive.id),
            "title": "x",
            "hours": 1,
            "month": 3,
            "year": 2026,
        },
    )
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "INACTIVE_RESOURCE"


def test_bulk_delete_requires_project_id(client, session):
    project = make_project(session)
    make_assignment(session, project, None, month=1, year=2026)
    make_assignment(session, project, None, month=2, year=2026)

    assert client.delete("/assignments").status_code == 400

    resp = client.delete("/assignments", params={"projectId": str(project.id)})
    assert resp.status_code == 200
    assert resp.json()["data"] == {"message": "Deleted 2 assignments from project", "deletedCount": 2}


def test_update_and_delete_assignment(client, session):
    project = make_project(session)
    assignment = make_assignment(session, project, None, month=1, year=2026)

    resp = client.put(f"/assignments/{assignment.id}", json={"hours": 6, "skillName": "QA"})
    assert resp.status_code == 200
    assert resp.json()["data"]["hours"] == 6
    assert resp.json()["data"]["skillName"] == "QA"

    assert client.delete(f"/assignments/{assignment.id}").status_code == 204
    assert client.get(f"/assignments/{assignment.id}").status_code == 404


def test_config_endpoint(client, session):
    make_config(session, "theme", "true", config_type="boolean", team="SAP")

    resp = client.get("/config", params={"key": "theme", "team": "sap"})
    assert resp.status_code == 200
    assert resp.json()["data"]["value"] is True
    assert resp.json()["data"]["team"] == "SAP"

    missing_key = client.get("/config")
    assert missing_key.status_code == 400
    assert missing_key.json()["error"]["message"] == "Missing required parameter: key"

    not_found = client.get("/config", params={"key": "theme"})
    assert not_found.status_code == 404
    assert not_found.json()["error"]["message"] == "Configuration 'theme' not found"


def test_resources_are_scoped_by_team_header(client, session):
    make_resource(session)
    make_resource(session, code="BI0001", name="Bea", team="BI")

    scoped = client.get("/resources", headers={"x-user-team": "BI"})
    assert [r["name"] for r in scoped.json()["data"]["resources"]] == ["Bea"]

    everyone = client.get("/resources", headers={"x-user-team": "  "})
    assert everyone.json()["data"]["count"] == 2


def test_create_resource_over_http(client):
    resp = client.post(
        "/resources",
        json={"name": "Ana Garcia", "team": "SAP", "defaultCapacity": 120, "skills": [{"name": "ABAP"}]},
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["defaultCapacity"] == 120
    assert data["resourceSkills"] == [{"skillName": "ABAP", "proficiency": None}]

    invalid = client.post("/resources", json={"name": "Ana", "team": "SAP", "defaultCapacity": 500})
    assert invalid.status_code == 400
    assert invalid.json()["error"]["details"]["errors"][0]["field"] == "defaultCapacity"


def test_project_conflict_over_http(client):
    body = {"code": "P1", "title": "T", "team": "SAP"}
    assert client.post("/projects", json=body).status_code == 201

    resp = client.post("/projects", json=body)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


def test_capacity_endpoints(client, session):
    resource = make_resource(session)
    make_assignment(session, make_project(session), resource, month=3, year=2026, hours=40)

    below = client.put(
        "/capacity", json={"resourceId": str(resource.id), "month": 3, "year": 2026, "totalHours": 10}
    )
    assert below.status_code == 409
    assert below.json()["error"]["code"] == "CAPACITY_BELOW_ASSIGNED"

    ok = client.put("/capacity", json={"resourceId": str(resource.id), "month": 3, "year": 2026, "totalHours": 160})
    assert ok.status_code == 200
    assert ok.json()["data"]["utilizationPercentage"] == 25

    listing = client.get("/capacity", params={"resourceId": str(resource.id)}).json()["data"]
    assert listing["pagination"] == {"page": 1, "limit": 20, "total": 1, "totalPages": 1}

    assert client.get("/capacity", params={"month": 13}).status_code == 400
    assert client.get("/capacity/overview").status_code == 400
    overview = client.get("/capacity/overview", headers={"x-user-team": "SAP"}, params={"year": 2026})
    assert overview.status_code == 200
    assert overview.json()["data"]["kpis"]["totalResources"] == 1


def test_catalog_skills(client, session):
    ana = make_resource(session)
    make_skill(session, ana, "QA")

    resp = client.get("/skills")
    assert resp.json()["data"] == {"skills": [{"name": "QA", "resource_count": 1}], "count": 1}
    assert client.get("/statuses").json() == {"success": True, "data": []}


def test_request_validation_uses_the_envelope(client):
    resp = client.put("/capacity", json={"resourceId": str(uuid4()), "month": 13, "year": 2026, "totalHours": 1})

    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["message"] == "Validation failed"
    assert error["code"] == "BAD_REQUEST"
    assert [e["field"] for e in error["details"]["errors"]] == ["month"]


def test_unknown_method_is_405(client):
    resp = client.patch("/resources")

    assert resp.status_code == 405
    assert resp.json()["error"] == {"message": "Method PATCH not allowed", "code": "METHOD_NOT_ALLOWED", "details": None}


def test_unhandled_errors_become_generic_500(settings, database):
    app = create_app(settings, database=database)

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret detail")

    with TestClient(app, raise_server_exceptions=False) as client:
        resp = client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": {"message": "Internal server error", "code": "INTERNAL_ERROR", "details": None},
    }


def test_internal_errors_keep_their_message(settings, database):
    app = create_app(settings, database=database)

    @app.get("/down")
    def down():
        raise InternalError("Database unavailable")

    with TestClient(app, raise_server_exceptions=False) as client:
        resp = client.get("/down")

    assert resp.status_code == 500
    assert resp.json()["error"] == {"message": "Database unavailable", "code": "INTERNAL_ERROR", "details": None}


def test_overview_uses_the_working_days_setting(database):
    settings = Settings(database_url="sqlite://", create_tables=True, log_level="WARNING", working_days_per_month=16)
    with database.session() as session:
        make_resource(session)
    app = create_app(settings, database=database)

    with TestClient(app) as client:
        resp = client.get("/capacity/overview", headers={"x-user-team": "SAP"}, params={"year": 2026})

    assert resp.status_code == 200
    assert resp.json()["data"]["resources"][0]["monthlyData"][2]["totalHours"] == 220


def test_created_resource_carries_timestamps(client):
    resp = client.post("/resources", json={"name": "Ana Garcia", "team": "SAP"})

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["createdAt"]
    assert data["updatedAt"]

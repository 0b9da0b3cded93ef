import uuid

import pytest


class TestProjectCrud:
    """项目增删改查"""

    def test_create_project(self, api_client, make_center):
        center = make_center()
        name = f"Project {uuid.uuid4().hex[:6]}"
        resp = api_client.post("/api/projects", {
            "name": name,
            "description": "desc",
            "center_id": center["id"],
            "project_status": "in_progress",
        })
        assert resp.get("_http_status") == 201, resp
        project = resp["data"]
        assert project["name"] == name
        assert project["center_id"] == center["id"]
        assert project["center_name"] == center["name"]
        assert project["project_status"] == "in_progress"

    @pytest.mark.parametrize("payload, field", [
        ({"name": "x", "center_id": 1, "project_status": "planning"}, "name"),
        ({"name": "Valid", "center_id": 0, "project_status": "planning"}, "center_id"),
        ({"name": "Valid", "center_id": 1, "project_status": "done"}, "project_status"),
        ({"name": "Valid", "center_id": 1}, "project_status"),
        ({"name": "Valid", "center_id": 1, "project_status": "planning", "description": "d" * 2001},
         "description"),
    ])
    def test_create_validation(self, api_client, payload, field):
        resp = api_client.post("/api/projects", payload)
        assert resp.get("_http_status") == 400
        assert field in {e["field"] for e in resp["errors"]}

    def test_non_object_body(self, api_client):
        resp = api_client.post("/api/projects", ["Orphan"])
        assert resp.get("_http_status") == 400
        assert resp["errors"][0]["field"] == "body"

    def test_unknown_center(self, api_client):
        resp = api_client.post("/api/projects", {
            "name": "Orphan", "center_id": 99999, "project_status": "planning",
        })
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Center not found"

    def test_name_unique_per_center(self, api_client, make_center, make_project):
        """同一中心下项目名唯一，不同中心可以重名"""
        a, b = make_center(), make_center()
        make_project(center_id=a["id"], name="Shared Name")

        dup = api_client.post("/api/projects", {
            "name": "Shared Name", "center_id": a["id"], "project_status": "planning",
        })
        assert dup.get("_http_status") == 400
        assert dup["message"] == "Project name already exists in this center"

        other = api_client.post("/api/projects", {
            "name": "Shared Name", "center_id": b["id"], "project_status": "planning",
        })
        assert other.get("_http_status") == 201

    def test_update_project(self, api_client, make_center, make_project):
        project = make_project()
        target = make_center()
        resp = api_client.put(f"/api/projects/{project['id']}", {
            "name": project["name"],
            "description": "moved",
            "center_id": target["id"],
            "project_status": "on_hold",
        })
        assert resp.get("_http_status") == 200, resp
        assert resp["data"]["center_id"] == target["id"]
        assert resp["data"]["center_name"] == target["name"]
        assert resp["data"]["project_status"] == "on_hold"

    def test_get_project_detail(self, api_client, make_project, make_staff, make_member):
        project = make_project()
        staff = make_staff(center_id=project["center_id"])
        make_member(project["id"], staff["id"], "2024-02-01T00:00:00Z")

        resp = api_client.get(f"/api/projects/{project['id']}")
        assert resp.get("_http_status") == 200
        data = resp["data"]
        assert data["project"]["id"] == project["id"]
        assert [m["staff_id"] for m in data["members"]] == [staff["id"]]
        assert data["members"][0]["staff_name"] == staff["name"]
        assert data["stats"] == {"memberCount": 1, "activeMembers": 1}

    def test_get_missing(self, api_client):
        resp = api_client.get("/api/projects/99999")
        assert resp.get("_http_status") == 404
        assert resp["message"] == "Project not found"

    def test_delete_project(self, api_client, make_project, make_staff, make_member):
        project = make_project()
        staff = make_staff(center_id=project["center_id"])
        member = make_member(project["id"], staff["id"], "2024-02-01T00:00:00Z")["data"]

        blocked = api_client.delete(f"/api/projects/{project['id']}")
        assert blocked.get("_http_status") == 400
        assert blocked["message"] == "Cannot delete project with associated members"

        api_client.delete(f"/api/project-members/{member['id']}")
        resp = api_client.delete(f"/api/projects/{project['id']}")
        assert resp.get("_http_status") == 200
        assert resp["message"] == "Project deleted successfully"


class TestProjectList:

    def test_list_filters(self, api_client, make_center, make_project):
        a, b = make_center(), make_center()
        make_project(center_id=a["id"], name="Apollo", project_status="planning")
        make_project(center_id=a["id"], name="Gemini", project_status="completed")
        make_project(center_id=b["id"], name="Mercury", project_status="planning")

        resp = api_client.get("/api/projects")
        assert resp.get("_http_status") == 200
        assert resp["message"] == "Fetched projects successfully"
        assert resp["data"]["pagination"]["totalItems"] == 3
        assert resp["data"]["filters"]["statuses"] == [
            "planning", "in_progress", "completed", "on_hold", "cancelled",
        ]
        assert {c["id"] for c in resp["data"]["filters"]["centers"]} == {a["id"], b["id"]}

        by_center = api_client.get("/api/projects", params={"center_id": a["id"]})
        assert {p["name"] for p in by_center["data"]["projects"]} == {"Apollo", "Gemini"}

        by_status = api_client.get("/api/projects", params={"project_status": "planning"})
        assert {p["name"] for p in by_status["data"]["projects"]} == {"Apollo", "Mercury"}

        search = api_client.get("/api/projects", params={"search": "gem"})
        assert [p["name"] for p in search["data"]["projects"]] == ["Gemini"]

    def test_list_member_count_and_sort(self, api_client, make_center, make_project, make_staff, make_member):
        center = make_center()
        p1 = make_project(center_id=center["id"], name="Alpha")
        make_project(center_id=center["id"], name="Bravo")
        staff = make_staff(center_id=center["id"])
        make_member(p1["id"], staff["id"], "2024-03-01T00:00:00Z")

        resp = api_client.get("/api/projects", params={"sortBy": "name", "sortOrder": "desc"})
        projects = resp["data"]["projects"]
        assert [p["name"] for p in projects] == ["Bravo", "Alpha"]
        assert {p["name"]: p["member_count"] for p in projects} == {"Alpha": 1, "Bravo": 0}


class TestProjectStatsAndAccess:

    def test_stats(self, api_client, make_project, make_staff, make_member):
        project = make_project()
        cid = project["center_id"]
        s1 = make_staff(center_id=cid, gender="female")
        s2 = make_staff(center_id=cid, gender="female")
        s3 = make_staff(center_id=cid, gender="male")
        make_member(project["id"], s1["id"], "2024-01-01T00:00:00Z", "2024-01-05T00:00:00Z")
        make_member(project["id"], s2["id"], "2024-01-01T00:00:00Z")
        make_member(project["id"], s3["id"], "2024-01-01T00:00:00Z")

        resp = api_client.get(f"/api/projects/{project['id']}/stats")
        assert resp.get("_http_status") == 200
        data = resp["data"]
        assert data["projectId"] == project["id"]
        assert data["members"] == {"total_members": 3, "active_members": 2, "completed_members": 1}
        assert data["genderDistribution"] == [
            {"gender": "female", "count": 2},
            {"gender": "male", "count": 1},
        ]

    def test_ownership_through_center(self, login_as, make_center, make_project, make_staff):
        """员工所在中心的项目可见，其他中心的项目不可见"""
        own, other = make_center(), make_center()
        own_project = make_project(center_id=own["id"])
        other_project = make_project(center_id=other["id"])
        name = f"pm_{uuid.uuid4().hex[:6]}"
        make_staff(center_id=own["id"], name=name)
        c, _ = login_as("member", name=name)

        assert c.get(f"/api/projects/{own_project['id']}").get("_http_status") == 200
        assert c.get(f"/api/projects/{other_project['id']}/stats").get("_http_status") == 403

    def test_member_role_cannot_write(self, login_as, make_center):
        center = make_center()
        c, _ = login_as("member")
        resp = c.post("/api/projects", {"name": "Nope", "center_id": center["id"], "project_status": "planning"})
        assert resp.get("_http_status") == 403

import pytest


class TestRoles:
    """角色管理（仅 admin）"""

    def test_default_roles_seeded(self, api_client):
        resp = api_client.get("/api/roles", params={"sortBy": "name", "sortOrder": "asc"})
        assert resp.get("_http_status") == 200
        roles = resp["data"]["roles"]
        assert [r["name"] for r in roles] == ["admin", "manager", "member", "staff"]
        assert {r["name"]: r["user_count"] for r in roles}["admin"] == 1

    def test_create_update_delete(self, api_client):
        resp = api_client.post("/api/roles", {"name": "qa lead"})
        assert resp.get("_http_status") == 201, resp
        role = resp["data"]

        upd = api_client.put(f"/api/roles/{role['id']}", {"name": "qa_lead"})
        assert upd.get("_http_status") == 200
        assert upd["data"]["name"] == "qa_lead"

        assert api_client.delete(f"/api/roles/{role['id']}").get("_http_status") == 200
        assert api_client.get(f"/api/roles/{role['id']}").get("_http_status") == 404

    @pytest.mark.parametrize("name", ["a", "bad-name!", "x" * 101])
    def test_validation(self, api_client, name):
        resp = api_client.post("/api/roles", {"name": name})
        assert resp.get("_http_status") == 400
        assert resp["errors"][0]["field"] == "name"

    def test_non_object_body(self, api_client):
        resp = api_client.post("/api/roles", ["auditor"])
        assert resp.get("_http_status") == 400
        assert resp["errors"][0]["field"] == "body"

    def test_duplicate(self, api_client):
        resp = api_client.post("/api/roles", {"name": "manager"})
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Role name already exists"

    def test_delete_blocked_by_users(self, api_client, make_user, role_ids):
        make_user(role="member")
        resp = api_client.delete(f"/api/roles/{role_ids['member']}")
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Cannot delete role with associated users"

    def test_get_role(self, api_client, make_user, make_staff, role_ids):
        make_staff(name="role_detail")
        make_user(role="member", name="role_detail")
        make_user(role="member", name="role_plain", status="inactive")

        resp = api_client.get(f"/api/roles/{role_ids['member']}")
        assert resp.get("_http_status") == 200
        data = resp["data"]
        assert data["role"]["name"] == "member"
        flags = {u["name"]: u["has_staff_profile"] for u in data["users"]}
        assert flags == {"role_detail": True, "role_plain": False}
        assert data["stats"] == {
            "total_users": 2, "active_users": 1, "inactive_users": 1, "suspended_users": 0,
        }

    def test_role_stats(self, api_client, make_user, make_staff, make_project, make_member, role_ids):
        staff = make_staff(name="role_stats_a")
        make_user(role="member", name="role_stats_a")
        make_user(role="member", name="role_stats_b")
        p1 = make_project(center_id=staff["center_id"])
        p2 = make_project(center_id=staff["center_id"])
        make_member(p1["id"], staff["id"], "2024-01-01T00:00:00Z", "2024-01-10T00:00:00Z")
        make_member(p2["id"], staff["id"], "2024-02-01T00:00:00Z")

        resp = api_client.get(f"/api/roles/{role_ids['member']}/stats")
        assert resp.get("_http_status") == 200
        data = resp["data"]
        assert data["roleId"] == role_ids["member"]
        assert data["users"]["total_users"] == 2
        assert data["staff"] == {"total_staff": 1, "assigned_to_center": 1, "unassigned": 0}
        assert data["projects"] == {"total_projects": 2, "staff_in_projects": 1, "active_participations": 1}

    def test_manager_forbidden(self, login_as):
        c, _ = login_as("manager")
        assert c.get("/api/roles").get("_http_status") == 403

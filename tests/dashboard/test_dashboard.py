class TestDashboard:
    """首页汇总"""

    def test_empty_summary(self, api_client):
        resp = api_client.get("/api/dashboard/summary")
        assert resp.get("_http_status") == 200
        data = resp["data"]
        assert data["totalCenters"] == 0
        assert data["totalProjects"] == 0
        assert data["totalStaff"] == 0
        assert data["activeMemberships"] == 0
        assert data["centers"] == []
        assert set(data["projectsByStatus"].values()) == {0}

    def test_summary_counts(self, api_client, make_center, make_staff, make_project, make_member):
        a = make_center(name="A Center")
        b = make_center(name="B Center")
        s1 = make_staff(center_id=a["id"])
        s2 = make_staff(center_id=a["id"])
        p1 = make_project(center_id=a["id"], project_status="in_progress")
        make_project(center_id=b["id"], project_status="planning")
        make_member(p1["id"], s1["id"], "2024-01-01T00:00:00Z")
        make_member(p1["id"], s2["id"], "2024-01-01T00:00:00Z", "2024-01-02T00:00:00Z")

        data = api_client.get("/api/dashboard/summary")["data"]
        assert data["totalCenters"] == 2
        assert data["totalProjects"] == 2
        assert data["totalStaff"] == 2
        assert data["activeMemberships"] == 1
        assert data["centers"] == [
            {"id": a["id"], "name": "A Center", "staffCount": 2, "projectCount": 1},
            {"id": b["id"], "name": "B Center", "staffCount": 0, "projectCount": 1},
        ]
        assert data["projectsByStatus"]["in_progress"] == 1
        assert data["projectsByStatus"]["planning"] == 1
        assert data["projectsByStatus"]["completed"] == 0

    def test_any_role_can_read(self, login_as):
        c, _ = login_as("member")
        assert c.get("/api/dashboard/summary").get("_http_status") == 200

    def test_requires_login(self, anon_client):
        assert anon_client.get("/api/dashboard/summary").get("_http_status") == 401

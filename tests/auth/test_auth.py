import uuid

import pytest

from extensions.jwt import create_token, decode_token
from tests.utils.api_client import APIClient


class TestLogin:
    """登录相关测试"""

    def test_login_success(self, anon_client):
        """admin 登录成功，返回 token 与不含密码的用户信息"""
        resp = anon_client.post("/api/auth/login", {"username": "admin", "password": "admin123"})

        assert resp.get("_http_status") == 200, resp
        assert resp["status"] == "success"
        assert resp["message"] == "Login successful"
        data = resp["data"]
        assert data["token"].count(".") == 2
        assert data["user"]["name"] == "admin"
        assert data["user"]["role_name"] == "admin"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]
        assert data["user"]["staff"] is None

    def test_token_payload(self, app, anon_client):
        """token 载荷包含 userId/username/role/roleId/iat/exp，有效期 24 小时"""
        resp = anon_client.post("/api/auth/login", {"username": "admin", "password": "admin123"})
        token = resp["data"]["token"]
        with app.app_context():
            payload = decode_token(token)
        assert payload["username"] == "admin"
        assert payload["role"] == "admin"
        assert payload["userId"] == resp["data"]["user"]["id"]
        assert payload["roleId"] == resp["data"]["user"]["role_id"]
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_login_wrong_password(self, anon_client):
        resp = anon_client.post("/api/auth/login", {"username": "admin", "password": "wrong-pass"})
        assert resp.get("_http_status") == 401
        assert resp["status"] == "error"
        assert resp["message"] == "Invalid credentials"

    def test_login_unknown_user(self, anon_client):
        resp = anon_client.post("/api/auth/login", {"username": "nobody_here", "password": "whatever1"})
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Invalid credentials"

    def test_login_validation_errors(self, anon_client):
        """用户名过短 + 密码过短 => 400，逐字段列出错误"""
        resp = anon_client.post("/api/auth/login", {"username": "ab", "password": "123"})
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Validation failed"
        fields = {e["field"] for e in resp["errors"]}
        assert fields == {"username", "password"}
        username_err = next(e for e in resp["errors"] if e["field"] == "username")
        assert username_err["value"] == "ab"

    @pytest.mark.parametrize("body", [["x"], "admin"])
    def test_login_non_object_body(self, anon_client, body):
        resp = anon_client.post("/api/auth/login", body)
        assert resp.get("_http_status") == 400
        assert resp["errors"][0]["field"] == "body"

    def test_login_inactive_account_checked_before_password(self, anon_client, make_user):
        """非 active 账号：即使密码错误也返回 Account is <status>"""
        user = make_user(role="staff", status="suspended")
        resp = anon_client.post("/api/auth/login", {"username": user["name"], "password": "bad-password"})
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Account is suspended"

    def test_login_includes_staff_profile(self, anon_client, make_user, make_staff):
        """有角色且存在同名员工档案时，user.staff 带出档案及中心信息"""
        name = f"alice_{uuid.uuid4().hex[:6]}"
        staff = make_staff(name=name)
        user = make_user(role="staff", name=name)

        resp = anon_client.post("/api/auth/login", {"username": user["name"], "password": user["password"]})
        assert resp.get("_http_status") == 200, resp
        profile = resp["data"]["user"]["staff"]
        assert profile["id"] == staff["id"]
        assert profile["center_name"] == staff["center_name"]


class TestRegister:

    def test_register_success(self, anon_client, role_ids):
        username = f"new_{uuid.uuid4().hex[:6]}"
        resp = anon_client.post("/api/auth/register", {
            "name": "New Person",
            "username": username,
            "password": "secret123",
            "role_id": role_ids["member"],
        })
        assert resp.get("_http_status") == 201, resp
        user = resp["data"]["user"]
        assert user["name"] == username
        assert user["status"] == "active"
        assert user["role"] == "member"

        login = anon_client.post("/api/auth/login", {"username": username, "password": "secret123"})
        assert login.get("_http_status") == 200

    def test_register_duplicate_username(self, anon_client):
        resp = anon_client.post("/api/auth/register", {
            "name": "Admin Again",
            "username": "admin",
            "password": "secret123",
        })
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Username already exists"

    def test_register_unknown_role(self, anon_client):
        resp = anon_client.post("/api/auth/register", {
            "name": "Ghost",
            "username": "ghost_user",
            "password": "secret123",
            "role_id": 999,
        })
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Role not found"
        login = anon_client.post("/api/auth/login", {"username": "ghost_user", "password": "secret123"})
        assert login.get("_http_status") == 401

    @pytest.mark.parametrize("payload, field", [
        ({"name": "A", "username": "valid_name", "password": "secret123"}, "name"),
        ({"name": "Valid", "username": "bad name!", "password": "secret123"}, "username"),
        ({"name": "Valid", "username": "valid_name", "password": "123"}, "password"),
        ({"name": "Valid", "username": "valid_name", "password": "secret123", "role_id": 0}, "role_id"),
    ])
    def test_register_validation(self, anon_client, payload, field):
        resp = anon_client.post("/api/auth/register", payload)
        assert resp.get("_http_status") == 400
        assert field in {e["field"] for e in resp["errors"]}


class TestTokenChecks:
    """每次请求都会校验 token 并重新读取用户"""

    def test_missing_token(self, anon_client):
        resp = anon_client.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Access token is required"

    def test_malformed_token(self, client):
        c = APIClient(client)
        c.set_token("not-a-jwt")
        resp = c.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Invalid token"

    def test_tampered_signature(self, client, admin_token):
        head, payload, sig = admin_token.split(".")
        tampered = f"{head}.{payload}.{'A' * len(sig)}"
        c = APIClient(client)
        c.set_token(tampered)
        resp = c.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Invalid token"

    def test_expired_token(self, app, client):
        with app.app_context():
            token = create_token(1, "admin", "admin", 1, expires_seconds=-10)
        c = APIClient(client)
        c.set_token(token)
        resp = c.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "Token expired"

    def test_token_for_deleted_user(self, app, client):
        with app.app_context():
            token = create_token(9999, "ghost", "admin", 1)
        c = APIClient(client)
        c.set_token(token)
        resp = c.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "User not found"

    def test_suspended_user_token_rejected(self, api_client, login_as):
        """已签发 token 的用户被停用后，下一次请求即被拒绝"""
        staff_client, user = login_as("staff")
        assert staff_client.get("/api/auth/me").get("_http_status") == 200

        resp = api_client.put(f"/api/users/{user['id']}", {"name": user["name"], "status": "suspended"})
        assert resp.get("_http_status") == 200, resp

        resp = staff_client.get("/api/auth/me")
        assert resp.get("_http_status") == 401
        assert resp["message"] == "User account is not active"

    def test_role_comes_from_store_not_token(self, api_client, login_as, role_ids):
        """token 中的 role 只是参考：降级后立即失去写权限"""
        mgr_client, user = login_as("manager")
        ok = mgr_client.post("/api/centers", {"name": "Mgr Center", "field": "IT", "address": "X"})
        assert ok.get("_http_status") == 201

        api_client.put(f"/api/users/{user['id']}", {"name": user["name"], "role_id": role_ids["staff"]})
        resp = mgr_client.post("/api/centers", {"name": "Mgr Center 2", "field": "IT", "address": "X"})
        assert resp.get("_http_status") == 403
        assert resp["message"] == "Insufficient permissions"


class TestMeLogoutPassword:

    def test_me(self, api_client):
        resp = api_client.get("/api/auth/me")
        assert resp.get("_http_status") == 200
        assert resp["data"]["user"]["name"] == "admin"
        assert resp["data"]["staff"] is None

    def test_logout(self, api_client, anon_client):
        assert api_client.post("/api/auth/logout").get("_http_status") == 200
        assert anon_client.post("/api/auth/logout").get("_http_status") == 401

    def test_change_password_flow(self, client, login_as):
        c, user = login_as("staff")
        resp = c.post("/api/auth/change-password", {
            "currentPassword": user["password"],
            "newPassword": "brand-new-pass",
        })
        assert resp.get("_http_status") == 200, resp
        assert resp["message"] == "Password changed successfully"

        anon = APIClient(client)
        old = anon.post("/api/auth/login", {"username": user["name"], "password": user["password"]})
        assert old.get("_http_status") == 401
        new = anon.post("/api/auth/login", {"username": user["name"], "password": "brand-new-pass"})
        assert new.get("_http_status") == 200

    def test_change_password_wrong_current(self, api_client):
        resp = api_client.post("/api/auth/change-password", {
            "currentPassword": "not-it",
            "newPassword": "another-pass",
        })
        assert resp.get("_http_status") == 400
        assert resp["message"] == "Current password is incorrect"

    def test_change_password_validation(self, api_client):
        resp = api_client.post("/api/auth/change-password", {"currentPassword": "", "newPassword": "123"})
        assert resp.get("_http_status") == 400
        assert {e["field"] for e in resp["errors"]} == {"currentPassword", "newPassword"}


class TestHealthAndRouting:

    def test_health(self, anon_client):
        resp = anon_client.get("/health")
        assert resp.get("_http_status") == 200
        assert resp["status"] == "OK"
        assert resp["environment"] == "testing"
        assert resp["timestamp"].endswith("Z")

    def test_unknown_route(self, anon_client):
        resp = anon_client.get("/api/nope")
        assert resp.get("_http_status") == 404
        assert resp["message"] == "Route /api/nope not found"

    def test_method_not_allowed(self, api_client):
        resp = api_client.request("PATCH", "/api/centers")
        assert resp.get("_http_status") == 405
        assert resp["status"] == "error"

import uuid

import pytest

from app import create_app
from extensions.database import db
from tests.utils.api_client import APIClient

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
DEFAULT_PASSWORD = "Test123!"


@pytest.fixture
def app():
    """每个测试一个全新的内存库 app（建表 + 默认角色 + admin）"""
    app = create_app("testing")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, username: str, password: str) -> str:
    resp = APIClient(client).post("/api/auth/login", {"username": username, "password": password})
    assert resp.get("_http_status") == 200, f"登录失败: {resp}"
    token = resp.get("data", {}).get("token")
    assert token, "登录响应中未找到token"
    return token


@pytest.fixture
def admin_token(client):
    """管理员登录获取token"""
    return _login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def api_client(client, admin_token):
    """已登录管理员的API客户端"""
    c = APIClient(client)
    c.set_token(admin_token)
    return c


@pytest.fixture
def anon_client(client):
    """未登录的API客户端"""
    return APIClient(client)


@pytest.fixture
def role_ids(api_client):
    """{角色名: id}"""
    resp = api_client.get("/api/roles", params={"limit": 100})
    assert resp.get("_http_status") == 200, resp
    return {r["name"]: r["id"] for r in resp["data"]["roles"]}


@pytest.fixture
def make_user(api_client, role_ids):
    """
    由管理员创建指定角色的账号，返回 dict(id, name, password, role)
    """
    def _create(role: str = "staff", name: str | None = None, password: str = DEFAULT_PASSWORD,
                status: str | None = None):
        name = name or f"user_{uuid.uuid4().hex[:8]}"
        payload = {"name": name, "password": password, "role_id": role_ids[role]}
        if status:
            payload["status"] = status
        resp = api_client.post("/api/users", payload)
        assert resp.get("_http_status") == 201, f"创建用户失败: {resp}"
        return {"id": resp["data"]["id"], "name": name, "password": password, "role": role}
    return _create


@pytest.fixture
def login_as(client, make_user):
    """创建账号并登录，返回 (APIClient, user)"""
    def _login_as(role: str = "staff", name: str | None = None):
        user = make_user(role=role, name=name)
        c = APIClient(client)
        c.set_token(_login(client, user["name"], user["password"]))
        return c, user
    return _login_as


@pytest.fixture
def make_center(api_client):
    def _create(name: str | None = None, field: str = "Software", address: str = "1 Main St"):
        payload = {"name": name or f"Center {uuid.uuid4().hex[:6]}", "field": field, "address": address}
        resp = api_client.post("/api/centers", payload)
        assert resp.get("_http_status") == 201, f"创建中心失败: {resp}"
        return resp["data"]
    return _create


@pytest.fixture
def make_project(api_client, make_center):
    def _create(center_id: int | None = None, name: str | None = None, project_status: str = "planning"):
        if center_id is None:
            center_id = make_center()["id"]
        payload = {
            "name": name or f"Project {uuid.uuid4().hex[:6]}",
            "description": "auto test project",
            "center_id": center_id,
            "project_status": project_status,
        }
        resp = api_client.post("/api/projects", payload)
        assert resp.get("_http_status") == 201, f"创建项目失败: {resp}"
        return resp["data"]
    return _create


@pytest.fixture
def make_staff(api_client, make_center):
    def _create(center_id: int | None = None, name: str | None = None, gender: str = "male",
                phone: str | None = None):
        if center_id is None:
            center_id = make_center()["id"]
        payload = {
            "name": name or f"Staff {uuid.uuid4().hex[:6]}",
            "gender": gender,
            "phone": phone or f"09{uuid.uuid4().int % 10 ** 8:08d}",
            "address": "2 Side St",
            "center_id": center_id,
        }
        resp = api_client.post("/api/staff", payload)
        assert resp.get("_http_status") == 201, f"创建员工失败: {resp}"
        return resp["data"]
    return _create


@pytest.fixture
def make_member(api_client):
    def _create(project_id: int, staff_id: int, start_time: str, end_time: str | None = None):
        payload = {"project_id": project_id, "staff_id": staff_id, "start_time": start_time}
        if end_time is not None:
            payload["end_time"] = end_time
        return api_client.post("/api/project-members", payload)
    return _create

import pytest

import promote_admin
from conftest import PASSWORD, SAMPLE_PROBLEM, auth_headers, create_problem
from errors import Forbidden, NotFound, ValidationFailed
from models.user import User
from models.user_progress import UserProgress
from services.problem_service import ProblemService
from services.progress_service import ProgressService
from services.user_service import UserService


def test_delete_user_removes_their_progress(db):
    UserService.create(db, "Admin", "admin@example.com", PASSWORD)
    user = UserService.create(db, "Ann", "ann@example.com", PASSWORD)
    problem = ProblemService.create(db, SAMPLE_PROBLEM)
    ProgressService.upsert(db, user.id, problem.id, solution="x")

    UserService.delete(db, user.id)

    assert db.query(User).filter_by(email="ann@example.com").first() is None
    assert db.query(UserProgress).count() == 0


def test_admin_accounts_cannot_be_deleted(db):
    admin = UserService.create(db, "Admin", "admin@example.com", PASSWORD)

    with pytest.raises(Forbidden):
        UserService.delete(db, admin.id)


def test_update_rejects_unknown_role(db):
    user = UserService.create(db, "Ann", "ann@example.com", PASSWORD)

    with pytest.raises(ValidationFailed):
        UserService.update(db, user.id, {"role": "Superuser"})


def test_last_active_admin_cannot_be_demoted_or_deactivated(db):
    admin = UserService.create(db, "Admin", "admin@example.com", PASSWORD)

    with pytest.raises(Forbidden):
        UserService.update(db, admin.id, {"role": "User"})
    with pytest.raises(Forbidden):
        UserService.update(db, admin.id, {"status": "inactive"})

    db.refresh(admin)
    assert (admin.role, admin.status) == ("Admin", "active")


def test_admin_can_be_demoted_while_another_remains(db):
    first = UserService.create(db, "Admin", "admin@example.com", PASSWORD)
    UserService.create(db, "Backup", "backup@example.com", PASSWORD, role="Admin")

    demoted = UserService.update(db, first.id, {"role": "User"})

    assert demoted.role == "User"


def test_promote_sets_admin_role(db):
    UserService.create(db, "Admin", "admin@example.com", PASSWORD)
    user = UserService.create(db, "Ann", "ann@example.com", PASSWORD, status="inactive")

    promote_admin.promote(db, "ANN@example.com")

    db.refresh(user)
    assert user.role == "Admin"
    assert user.status == "active"


def test_promote_unknown_email(db):
    with pytest.raises(NotFound):
        promote_admin.promote(db, "ghost@example.com")


# ── HTTP ──────────────────────────────────────────────────────────
def test_admin_lists_and_creates_users(client, admin_headers):
    resp = client.post("/api/admin/users", headers=admin_headers, json={
        "name": "Helper", "email": "helper@example.com", "password": PASSWORD, "role": "Admin",
    })
    assert resp.status_code == 201
    assert resp.json()["data"]["role"] == "Admin"

    users = client.get("/api/admin/users", headers=admin_headers).json()["data"]
    assert {u["email"] for u in users} == {"admin@example.com", "helper@example.com"}

    # The created admin has admin rights straight away.
    helper = auth_headers(client, "helper@example.com")
    assert client.get("/api/admin/stats", headers=helper).status_code == 200


def test_admin_routes_reject_regular_users(client, user_headers):
    for method, path in [("get", "/api/admin/users"), ("get", "/api/admin/stats")]:
        resp = getattr(client, method)(path, headers=user_headers)
        assert resp.status_code == 403
        assert resp.json()["kind"] == "forbidden"

    assert client.get("/api/admin/users").status_code == 401


def test_deactivated_admin_loses_access(client, admin_headers):
    other = client.post("/api/admin/users", headers=admin_headers, json={
        "name": "Other", "email": "other@example.com", "password": PASSWORD, "role": "Admin",
    }).json()["data"]
    other_headers = auth_headers(client, "other@example.com")

    client.put(f"/api/admin/users/{other['id']}", json={"status": "inactive"}, headers=admin_headers)

    assert client.get("/api/admin/users", headers=other_headers).status_code == 403


def test_delete_user_over_http(client, admin_headers, user_headers):
    problem = create_problem(client, admin_headers)
    client.post("/api/progress", json={"problem_id": problem["id"], "solution": "x"}, headers=user_headers)
    user_id = client.get("/api/auth/me", headers=user_headers).json()["data"]["id"]

    resp = client.delete(f"/api/admin/users/{user_id}", headers=admin_headers)
    assert resp.status_code == 200

    emails = [u["email"] for u in client.get("/api/admin/users", headers=admin_headers).json()["data"]]
    assert "user@example.com" not in emails
    # The token still decodes but the account is gone.
    assert client.get("/api/auth/me", headers=user_headers).status_code == 404


def test_cannot_delete_admin_over_http(client, admin_headers):
    admin_id = client.get("/api/auth/me", headers=admin_headers).json()["data"]["id"]

    resp = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)

    assert resp.status_code == 403


def test_update_user_validates_role(client, admin_headers, user_headers):
    user_id = client.get("/api/auth/me", headers=user_headers).json()["data"]["id"]

    resp = client.put(f"/api/admin/users/{user_id}", json={"role": "Superuser"}, headers=admin_headers)

    assert resp.status_code == 422


def test_stats_counts(client, admin_headers, user_headers):
    first = create_problem(client, admin_headers, title="A")
    second = create_problem(client, admin_headers, title="B")
    client.post("/api/progress", json={"problem_id": first["id"], "solution": "x"}, headers=user_headers)
    client.post(f"/api/progress/{second['id']}/complete", headers=user_headers)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()["data"]

    assert stats == {"users": 2, "active_users": 2, "problems": 2, "attempts": 2, "completions": 1}


def test_sole_admin_cannot_demote_self_over_http(client, admin_headers):
    admin_id = client.get("/api/auth/me", headers=admin_headers).json()["data"]["id"]

    resp = client.put(f"/api/admin/users/{admin_id}", json={"role": "User"}, headers=admin_headers)

    assert resp.status_code == 403
    assert client.get("/api/admin/users", headers=admin_headers).status_code == 200

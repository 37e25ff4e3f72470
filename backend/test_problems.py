import pytest

from conftest import PASSWORD, SAMPLE_PROBLEM, create_problem
from errors import Conflict, NotFound
from models.problem import Problem
from models.user_progress import UserProgress
from services import problem_service
from services.problem_service import ProblemService
from services.progress_service import ProgressService
from services.user_service import UserService


def _titles(n):
    return [f"Problem {i}" for i in range(1, n + 1)]


def test_create_assigns_sequential_display_ids(db):
    first = ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "A"})
    second = ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "B"})

    assert first.display_id == 1
    assert second.display_id == 2


def test_delete_first_renumbers_remaining(db):
    first = ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "A"})
    second = ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "B"})

    ProblemService.delete(db, first.id)

    remaining = ProblemService.get(db, second.id)
    assert remaining.display_id == 1
    assert db.query(Problem).count() == 1


def test_delete_in_the_middle_shifts_only_later_problems(db):
    problems = [ProblemService.create(db, {**SAMPLE_PROBLEM, "title": t}) for t in _titles(5)]

    renumbered = ProblemService.delete(db, problems[2].id)

    assert renumbered == 2
    rows = db.query(Problem).order_by(Problem.display_id).all()
    assert [p.title for p in rows] == ["Problem 1", "Problem 2", "Problem 4", "Problem 5"]
    assert [p.display_id for p in rows] == [1, 2, 3, 4]


def test_delete_then_create_keeps_numbering_gapless(db):
    problems = [ProblemService.create(db, {**SAMPLE_PROBLEM, "title": t}) for t in _titles(3)]
    ProblemService.delete(db, problems[0].id)

    new = ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "Problem 4"})

    assert new.display_id == 3
    assert sorted(p.display_id for p in db.query(Problem).all()) == [1, 2, 3]


def test_delete_removes_progress_rows(db):
    user = UserService.create(db, "Ann", "ann@example.com", "Secret123")
    problem = ProblemService.create(db, SAMPLE_PROBLEM)
    ProgressService.upsert(db, user.id, problem.id, solution="x")

    ProblemService.delete(db, problem.id)

    assert db.query(UserProgress).count() == 0


def test_delete_unknown_problem(db):
    with pytest.raises(NotFound):
        ProblemService.delete(db, "0" * 32)


def test_colliding_display_id_is_a_conflict(db):
    ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "A"})
    # Row written by another process that numbered concurrently: ids are now {1, 3}.
    stray = Problem(display_id=3)
    problem_service._apply(stray, {**SAMPLE_PROBLEM, "title": "Stray"})
    db.add(stray)
    db.commit()

    with pytest.raises(Conflict):
        ProblemService.create(db, {**SAMPLE_PROBLEM, "title": "C"})
    assert db.query(Problem).count() == 2


def test_update_changes_content_but_not_numbering(db):
    problem = ProblemService.create(db, SAMPLE_PROBLEM)

    updated = ProblemService.update(db, problem.id, {"title": "New title", "hints": [], "display_id": 9})

    d = problem_service.problem_to_dict(updated)
    assert d["title"] == "New title"
    assert d["hints"] == []
    assert d["display_id"] == 1


# ── HTTP ──────────────────────────────────────────────────────────
def test_problem_crud_over_http(client, admin_headers):
    first = create_problem(client, admin_headers, title="A")
    second = create_problem(client, admin_headers, title="B")
    assert (first["display_id"], second["display_id"]) == (1, 2)

    detail = client.get(f"/api/problems/{second['id']}").json()["data"]
    assert detail["hints"][0]["title"] == "Encoding"
    assert detail["functional_requirements"] == SAMPLE_PROBLEM["functional_requirements"]

    resp = client.put(f"/api/problems/{second['id']}", json={"difficulty": "Hard"}, headers=admin_headers)
    assert resp.json()["data"]["difficulty"] == "Hard"

    resp = client.delete(f"/api/problems/{first['id']}", headers=admin_headers)
    assert resp.status_code == 200
    listing = client.get("/api/problems").json()["data"]
    assert [(p["title"], p["display_id"]) for p in listing] == [("B", 1)]
    assert listing[0]["attempted"] is False


def test_list_filters_by_difficulty(client, admin_headers):
    create_problem(client, admin_headers, title="Easy one", difficulty="Easy")
    create_problem(client, admin_headers, title="Hard one", difficulty="Hard")

    listing = client.get("/api/problems", params={"difficulty": "Hard"}).json()["data"]

    assert [p["title"] for p in listing] == ["Hard one"]


def test_problem_writes_require_admin(client, admin_headers, user_headers):
    resp = client.post("/api/problems", json=SAMPLE_PROBLEM, headers=user_headers)
    assert resp.status_code == 403

    resp = client.post("/api/problems", json=SAMPLE_PROBLEM)
    assert resp.status_code == 401


def test_create_rejects_bad_difficulty_and_hints(client, admin_headers):
    resp = client.post("/api/problems", json={**SAMPLE_PROBLEM, "difficulty": "Extreme"}, headers=admin_headers)
    assert resp.status_code == 422

    resp = client.post("/api/problems", json={**SAMPLE_PROBLEM, "hints": [{"id": "h1", "title": "t"}]},
                       headers=admin_headers)
    assert resp.status_code == 422


def test_get_unknown_and_malformed_problem(client):
    assert client.get(f"/api/problems/{'0' * 32}").status_code == 404
    assert client.get("/api/problems/undefined").json()["kind"] == "invalid_identifier"


def test_demoted_admin_loses_write_access(client, admin_headers):
    client.post("/api/admin/users", headers=admin_headers, json={
        "name": "Backup", "email": "backup@example.com", "password": PASSWORD, "role": "Admin",
    })
    me = client.get("/api/auth/me", headers=admin_headers).json()["data"]
    client.put(f"/api/admin/users/{me['id']}", json={"role": "User"}, headers=admin_headers)

    resp = client.post("/api/problems", json=SAMPLE_PROBLEM, headers=admin_headers)

    assert resp.status_code == 403

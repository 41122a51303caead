from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient
from jose import jwt


def _reset_runtime_caches():
    from core.config import get_settings
    from core.db import reset_engine

    reset_engine()
    get_settings.cache_clear()


def _purge_api_modules() -> None:
    for name in ["api.main", "api.routes", "api.ratelimit"]:
        sys.modules.pop(name, None)


def _seed():
    from core.bootstrap import ensure_seeded
    from core.db import session_scope
    from core.models import AthleteGroup, AthleteGroupMember, User

    with session_scope() as s:
        ensure_seeded(s)
        s.add_all(
            [
                User(id="coach-1", role="coach", first_name="Casey", last_name="Coach", email="casey@club.io"),
                User(id="coach-2", role="coach", email="other@club.io"),
                User(id="ath-1", role="athlete", first_name="Alex", last_name="Lifter"),
                User(id="ath-2", role="athlete", email="sam@club.io"),
            ]
        )
        group = AthleteGroup(id=1, coach_id="coach-1", name="Varsity")
        group.members = [AthleteGroupMember(athlete_id="ath-1"), AthleteGroupMember(athlete_id="ath-2")]
        s.add(group)


def _create_schema():
    from core.db import get_engine
    from core.models import Base

    Base.metadata.create_all(bind=get_engine())


def _build_client(tmp_path: Path, monkeypatch, env_overrides: dict[str, str] | None = None) -> TestClient:
    db_path = tmp_path / "api_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173")
    monkeypatch.delenv("JWT_AUDIENCE", raising=False)
    if env_overrides:
        for key, value in env_overrides.items():
            monkeypatch.setenv(key, value)

    _reset_runtime_caches()
    _purge_api_modules()
    _create_schema()
    _seed()

    from api.main import create_app

    return TestClient(create_app())


def _headers(user_id: str, role: str) -> dict[str, str]:
    from api.auth import create_access_token

    return {"Authorization": f"Bearer {create_access_token(user_id=user_id, role=role)}"}


COACH = ("coach-1", "coach")
OTHER_COACH = ("coach-2", "coach")
ATHLETE = ("ath-1", "athlete")
OTHER_ATHLETE = ("ath-2", "athlete")


def _first_template_id(client: TestClient) -> int:
    resp = client.get("/api/v1/templates", headers=_headers(*COACH))
    assert resp.status_code == 200, resp.text
    return resp.json()[0]["id"]


# ── Ops / auth ─────────────────────────────────────────────────────────────


def test_health_echoes_or_generates_request_id_header(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-test-123"})
        assert resp.status_code == 200, resp.text
        assert resp.headers["X-Request-ID"] == "req-test-123"
        assert resp.json()["status"] in {"OK", "WARN"}

        generated = client.get("/api/v1/health")
        assert generated.headers.get("X-Request-ID")


def test_missing_and_invalid_tokens(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        resp = client.get("/api/v1/templates")
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "AUTH_REQUIRED"

        bad = jwt.encode({"sub": "coach-1", "role": "coach"}, "wrong-secret", algorithm="HS256")
        resp = client.get("/api/v1/templates", headers={"Authorization": f"Bearer {bad}"})
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "INVALID_TOKEN"

        from api.auth import create_access_token

        expired = create_access_token(user_id="coach-1", role="coach", expires_in_seconds=-60)
        resp = client.get("/api/v1/templates", headers={"Authorization": f"Bearer {expired}"})
        assert resp.status_code == 401
        assert resp.json()["detail"]["code"] == "TOKEN_EXPIRED"


def test_role_gates(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        resp = client.get("/api/v1/templates", headers=_headers(*ATHLETE))
        assert resp.status_code == 403
        assert resp.json()["detail"]["code"] == "FORBIDDEN_ROLE"

        resp = client.get("/api/v1/athlete/workouts", headers=_headers(*COACH))
        assert resp.status_code == 403


# ── Templates & custom workouts ──────────────────────────────────────────


def test_template_detail_and_clone(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        listing = client.get("/api/v1/templates", params={"difficulty": "Beginner"}, headers=coach)
        assert listing.status_code == 200
        assert listing.json()
        assert all(t["difficulty"] == "Beginner" for t in listing.json())

        template_id = listing.json()[0]["id"]
        detail = client.get(f"/api/v1/templates/{template_id}", headers=coach).json()
        assert detail["source_type"] == "TEMPLATE"
        assert detail["blocks"][0]["exercises"][0]["prescription"]["sets"] >= 1

        clone = client.post(f"/api/v1/templates/{template_id}/clone", headers=coach)
        assert clone.status_code == 201, clone.text
        body = clone.json()
        assert body["source_type"] == "CUSTOM"
        assert body["source_template_id"] == template_id
        assert body["coach_id"] == "coach-1"
        assert [b["title"] for b in body["blocks"]] == [b["title"] for b in detail["blocks"]]

        missing = client.post("/api/v1/templates/99999/clone", headers=coach)
        assert missing.status_code == 404
        assert missing.json()["detail"]["code"] == "NOT_FOUND"


def test_custom_workout_crud_and_ownership(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        payload = {
            "title": "Speed Day",
            "tags": ["Speed", "speed"],
            "blocks": [
                {"title": "Sprints", "order": 1, "exercises": [{"name": "Box Jump", "order": 1, "prescription": {"sets": 4, "reps": "5"}}]}
            ],
        }
        created = client.post("/api/v1/custom-workouts", json=payload, headers=coach)
        assert created.status_code == 201, created.text
        workout_id = created.json()["id"]
        assert created.json()["tags"] == ["Speed"]

        payload["blocks"] = [{"title": "Jumps", "order": 1, "exercises": []}]
        updated = client.put(f"/api/v1/custom-workouts/{workout_id}", json=payload, headers=coach)
        assert updated.status_code == 200
        assert [b["title"] for b in updated.json()["blocks"]] == ["Jumps"]

        assert client.get(f"/api/v1/custom-workouts/{workout_id}", headers=_headers(*OTHER_COACH)).status_code == 403
        assert [w["id"] for w in client.get("/api/v1/custom-workouts", headers=coach).json()] == [workout_id]

        invalid = client.post("/api/v1/custom-workouts", json={"title": "   "}, headers=coach)
        assert invalid.status_code == 422

        deleted = client.delete(f"/api/v1/custom-workouts/{workout_id}", headers=coach)
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/custom-workouts/{workout_id}", headers=coach).status_code == 404


# ── Assignment flow ──────────────────────────────────────────────────────


def test_assign_log_complete_flow(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        athlete = _headers(*ATHLETE)
        template_id = _first_template_id(client)

        assigned = client.post(
            "/api/v1/coach/assignments",
            json={"source_type": "TEMPLATE", "source_id": template_id, "scheduled_date": "2024-06-03", "group_id": 1},
            headers=coach,
        )
        assert assigned.status_code == 201, assigned.text
        assert assigned.json()["count"] == 2
        assignment_id = next(a["id"] for a in assigned.json()["assignments"] if a["athlete_id"] == "ath-1")

        listing = client.get("/api/v1/athlete/workouts", headers=athlete).json()
        assert [a["id"] for a in listing] == [assignment_id]
        assert listing[0]["coach_name"] == "Casey Coach"
        assert listing[0]["status"] == "UPCOMING"

        opened = client.get(f"/api/v1/athlete/workouts/{assignment_id}", headers=athlete).json()
        assert opened["workout"]["id"] == template_id
        assert opened["log"] is None

        saved = client.post(
            f"/api/v1/athlete/workouts/{assignment_id}/log",
            json={
                "overall_notes": "Solid",
                "sets": [
                    {"exercise_name": "Back Squat", "set_number": 1, "reps": 5, "weight": "60kg", "rpe": 7},
                    {"exercise_name": "Back Squat", "set_number": 2, "reps": 5, "weight": "60kg", "rpe": 8},
                ],
                "heart_rate": {"avg_heart_rate": 130, "max_heart_rate": 165, "min_heart_rate": 88, "device_name": "Polar H10"},
            },
            headers=athlete,
        )
        assert saved.status_code == 200, saved.text
        assert len(saved.json()["sets"]) == 2
        assert saved.json()["completed_at"] is None

        resaved = client.post(
            f"/api/v1/athlete/workouts/{assignment_id}/log",
            json={"overall_notes": "Edited", "sets": [{"exercise_name": "Plank", "set_number": 1, "time_seconds": 60}]},
            headers=athlete,
        )
        assert [s["exercise_name"] for s in resaved.json()["sets"]] == ["Plank"]
        assert resaved.json()["avg_heart_rate"] == 130

        done = client.post(f"/api/v1/athlete/workouts/{assignment_id}/complete", headers=athlete)
        assert done.status_code == 200
        assert done.json()["status"] == "COMPLETED"
        again = client.post(f"/api/v1/athlete/workouts/{assignment_id}/complete", headers=athlete)
        assert again.json()["status"] == "COMPLETED"

        coach_view = client.get(f"/api/v1/coach/assignments/{assignment_id}/log", headers=coach).json()
        assert coach_view["log"]["overall_notes"] == "Edited"
        assert coach_view["log"]["completed_at"] is not None

        assert client.get(f"/api/v1/coach/assignments/{assignment_id}/log", headers=_headers(*OTHER_COACH)).status_code == 403
        assert client.post(f"/api/v1/athlete/workouts/{assignment_id}/complete", headers=_headers(*OTHER_ATHLETE)).status_code == 403

        coach_list = client.get("/api/v1/coach/assignments", params={"status": "COMPLETED"}, headers=coach).json()
        assert [(a["id"], a["athlete_name"]) for a in coach_list] == [(assignment_id, "Alex Lifter")]


def test_assign_validation_errors(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        template_id = _first_template_id(client)
        base = {"source_type": "TEMPLATE", "source_id": template_id, "scheduled_date": "2024-06-03"}

        both = client.post("/api/v1/coach/assignments", json={**base, "athlete_ids": ["ath-1"], "group_id": 1}, headers=coach)
        assert both.status_code == 400
        assert both.json()["detail"]["code"] == "VALIDATION_ERROR"

        empty = client.post("/api/v1/coach/assignments", json={**base, "athlete_ids": []}, headers=coach)
        assert empty.status_code == 400

        foreign_group = client.post("/api/v1/coach/assignments", json={**base, "group_id": 1}, headers=_headers(*OTHER_COACH))
        assert foreign_group.status_code == 403
        assert foreign_group.json()["detail"]["code"] == "FORBIDDEN"

        missing = client.post("/api/v1/coach/assignments", json={**base, "source_id": 99999, "athlete_ids": ["ath-1"]}, headers=coach)
        assert missing.status_code == 404


def test_recurring_create_list_stop(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        template_id = _first_template_id(client)

        created = client.post(
            "/api/v1/coach/recurring-assignments",
            json={
                "source_type": "TEMPLATE",
                "source_id": template_id,
                "frequency": "2x_per_week",
                "days_of_week": [3, 1],
                "start_date": "2024-01-01",
                "end_date": "2024-01-14",
                "athlete_ids": ["ath-1"],
            },
            headers=coach,
        )
        assert created.status_code == 201, created.text
        body = created.json()
        assert body["count"] == 4
        assert body["recurring"]["days_of_week"] == [1, 3]
        assert sorted(a["scheduled_date"] for a in body["assignments"]) == ["2024-01-01", "2024-01-03", "2024-01-08", "2024-01-10"]
        recurring_id = body["recurring"]["id"]
        assert all(a["recurring_id"] == recurring_id for a in body["assignments"])

        listing = client.get("/api/v1/coach/recurring-assignments", headers=coach).json()
        assert listing[0]["days_label"] == "Mon, Wed"
        assert listing[0]["workout_title"]

        assert client.patch(f"/api/v1/coach/recurring-assignments/{recurring_id}/stop", headers=_headers(*OTHER_COACH)).status_code == 403
        stopped = client.patch(f"/api/v1/coach/recurring-assignments/{recurring_id}/stop", headers=coach)
        assert stopped.status_code == 200
        assert stopped.json()["active"] is False
        assert len(client.get("/api/v1/athlete/workouts", headers=_headers(*ATHLETE)).json()) == 4

        backwards = client.post(
            "/api/v1/coach/recurring-assignments",
            json={
                "source_type": "TEMPLATE",
                "source_id": template_id,
                "days_of_week": [1],
                "start_date": "2024-02-01",
                "end_date": "2024-01-01",
                "athlete_ids": ["ath-1"],
            },
            headers=coach,
        )
        assert backwards.status_code == 400


def test_write_rate_limit_returns_429_when_enabled(tmp_path, monkeypatch):
    env = {"APP_ENV": "dev", "RATE_LIMIT_ENABLED": "true", "WRITE_RATE_LIMIT": "2/minute"}
    with _build_client(tmp_path, monkeypatch, env_overrides=env) as client:
        coach = _headers(*COACH)
        template_id = _first_template_id(client)
        for _ in range(2):
            resp = client.post(f"/api/v1/templates/{template_id}/clone", headers=coach)
            assert resp.status_code == 201
        limited = client.post(f"/api/v1/templates/{template_id}/clone", headers=coach)
        assert limited.status_code == 429, limited.text
        assert limited.json()["detail"]["code"] == "RATE_LIMITED"


def test_recurring_storage_failure_leaves_no_partial_rows(tmp_path, monkeypatch):
    from sqlalchemy.exc import OperationalError

    import core.services.recurring as recurring_service

    real_create = recurring_service.create_assignments
    calls = {"n": 0}

    def failing_create(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 3:
            raise OperationalError("INSERT INTO assignments", {}, Exception("disk I/O error"))
        return real_create(*args, **kwargs)

    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        template_id = _first_template_id(client)
        monkeypatch.setattr(recurring_service, "create_assignments", failing_create)

        resp = client.post(
            "/api/v1/coach/recurring-assignments",
            json={
                "source_type": "TEMPLATE",
                "source_id": template_id,
                "days_of_week": [1, 3],
                "start_date": "2024-01-01",
                "end_date": "2024-01-14",
                "group_id": 1,
            },
            headers=coach,
        )
        assert resp.status_code == 500, resp.text
        assert resp.json()["detail"]["code"] == "INTERNAL"
        assert calls["n"] == 3

        assert client.get("/api/v1/coach/assignments", headers=coach).json() == []
        assert client.get("/api/v1/coach/recurring-assignments", headers=coach).json() == []
        assert client.get("/api/v1/athlete/workouts", headers=_headers(*ATHLETE)).json() == []


def test_oversized_athlete_id_rejected_before_write(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        coach = _headers(*COACH)
        template_id = _first_template_id(client)
        resp = client.post(
            "/api/v1/coach/assignments",
            json={
                "source_type": "TEMPLATE",
                "source_id": template_id,
                "scheduled_date": "2024-06-03",
                "athlete_ids": ["ath-1", "x" * 65],
            },
            headers=coach,
        )
        assert resp.status_code == 422, resp.text
        assert client.get("/api/v1/coach/assignments", headers=coach).json() == []


def test_openapi_documents_error_payload(tmp_path, monkeypatch):
    with _build_client(tmp_path, monkeypatch) as client:
        spec = client.get("/openapi.json").json()
        assert "ErrorResponse" in spec["components"]["schemas"]
        responses = spec["paths"]["/api/v1/coach/assignments"]["post"]["responses"]
        for code in ("400", "403", "404", "500"):
            assert responses[code]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")

import pytest

from conftest import FailingStore
from ecovoice.config import ACTIVITIES_KEY
from ecovoice.main import LocalState, app, get_local_state
from ecovoice.storage import JsonFileStore


def test_factors(client):
    data = client.get("/factors").json()
    assert data["transport"]["car"]["petrol"] == 0.23
    assert data["defaults"]["food"] == 5.0


def test_estimate(client):
    resp = client.post("/estimate", json={"category": "waste", "subtype": "metal", "quantity": 2})
    assert resp.status_code == 200
    assert resp.json() == {"category": "waste", "subtype": "metal", "quantity": 2.0, "factor": 0.5, "co2_kg": 1.0}


def test_estimate_rejects_negative_quantity(client):
    resp = client.post("/estimate", json={"category": "food", "subtype": "beef", "quantity": -1})
    assert resp.status_code == 400
    assert resp.json()["notice"]["title"] == "Please check the form"
    assert "quantity" in resp.json()["notice"]["description"]


def test_log_activity_and_dashboard(client):
    resp = client.post("/activities/transport", json={"mode": "car", "distance": 20, "fuel": "petrol"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["record"]["co2_kg"] == pytest.approx(4.6)
    assert body["notice"]["title"] == "Transport Activity Logged"
    assert body["summary"]["today_total"] == pytest.approx(4.6)

    client.post("/activities/food", json={"type": "vegan", "portions": 2})
    summary = client.get("/dashboard").json()
    assert summary["activity_count"] == 2
    assert summary["today_by_category"]["food"] == pytest.approx(4.6)
    assert summary["remaining_today"] == pytest.approx(15 - 9.2)
    assert len(client.get("/activities").json()) == 2


def test_missing_field_is_rejected(client):
    resp = client.post("/activities/waste", json={"type": "plastic"})
    assert resp.status_code == 400
    assert resp.json()["notice"]["title"] == "Please fill all waste fields"
    assert client.get("/activities").json() == []


def test_unparseable_field_is_rejected(client):
    resp = client.post("/activities/energy", json={"usage": "lots"})
    assert resp.status_code == 400
    assert client.get("/activities").json() == []


def test_goal(client):
    assert client.get("/goal").json() == {"value": 50}
    assert client.put("/goal", json={"value": 42}).json() == {"value": 42}
    assert client.get("/dashboard").json()["weekly"]["goal"] == 42
    assert client.put("/goal", json={"value": 0}).status_code == 400
    resp = client.put("/goal", json={"value": "abc"})
    assert resp.status_code == 400
    assert resp.json()["notice"]["variant"] == "destructive"


def test_voice_logs_activity(client):
    resp = client.post("/voice", json={"transcript": "I used electricity for 3 hours"})
    body = resp.json()
    assert body["activity"]["co2_kg"] == 1.5
    assert body["notice"]["title"] == "Activity Logged!"
    assert client.get("/activities").json()[0]["source"] == "voice"


def test_voice_clarification(client):
    body = client.post("/voice", json={"transcript": "good morning"}).json()
    assert body["activity"] is None
    assert body["notice"] is None
    assert "didn't quite catch" in body["response"]
    assert client.get("/activities").json() == []


def test_persistence_failure_surfaces_notice(client):
    state = LocalState(FailingStore()).load()
    app.dependency_overrides[get_local_state] = lambda: state
    resp = client.post("/activities/energy", json={"usage": 2})
    assert resp.status_code == 503
    assert resp.json()["notice"]["variant"] == "destructive"
    assert len(state.log) == 1


def test_corrupt_log_surfaces_notice(client):
    state = LocalState(FailingStore({ACTIVITIES_KEY: "garbage"}))
    app.dependency_overrides[get_local_state] = state.load
    resp = client.get("/dashboard")
    assert resp.status_code == 503
    assert resp.json()["notice"]["title"] == "Saved data is unreadable"


def test_undecodable_log_file_surfaces_notice(client, tmp_path):
    (tmp_path / f"{ACTIVITIES_KEY}.json").write_bytes(b"\xff\xfe[garbage")
    state = LocalState(JsonFileStore(tmp_path))
    app.dependency_overrides[get_local_state] = state.load
    resp = client.get("/activities")
    assert resp.status_code == 503
    assert resp.json()["notice"]["title"] == "Saved data is unreadable"


def test_voice_examples(client):
    examples = client.get("/voice/examples").json()
    assert "I drove 25 kilometers today" in examples


def test_challenges_and_leaderboard(client):
    user = client.post("/profiles", json={"username": "ada"}).json()
    challenges = client.get("/challenges", params={"user_id": user["id"]}).json()
    assert {c["status"] for c in challenges} == {"not_started"}
    target = next(c for c in challenges if c["title"] == "Zero-Waste Weekend")

    start = client.post(f"/challenges/{target['id']}/start", json={"user_id": user["id"]})
    assert start.json()["notice"]["title"] == "Challenge Started!"
    assert client.post(f"/challenges/{target['id']}/start", json={"user_id": user["id"]}).status_code == 409

    done = client.post(f"/challenges/{target['id']}/complete", json={"user_id": user["id"]}).json()
    assert done["total_points"] == 150

    statuses = {c["id"]: c["status"] for c in client.get("/challenges", params={"user_id": user["id"]}).json()}
    assert statuses[target["id"]] == "completed"

    board = client.get("/leaderboard").json()
    assert board[0] == {"rank": 1, "user_id": user["id"], "username": "ada", "total_points": 150}


def test_unknown_profile(client):
    resp = client.get("/profiles/user_nobody")
    assert resp.status_code == 404
    assert resp.json()["notice"]["title"] == "Profile not found"


def test_inquiry(client):
    resp = client.post("/inquiries", json={"company_name": "Acme", "contact_name": "Jo",
                                           "email": "jo@example.com", "message": "Hello"})
    assert resp.status_code == 200
    assert resp.json()["notice"]["title"] == "Inquiry Submitted!"
    bad = client.post("/inquiries", json={"company_name": "Acme", "contact_name": "Jo",
                                          "email": "not-an-email", "message": "Hello"})
    assert bad.status_code == 400
    assert "email" in bad.json()["notice"]["description"]

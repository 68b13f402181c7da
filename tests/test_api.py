from datetime import date

import pytest
from fastapi.testclient import TestClient

import api.weather
from core.errors import AuthError
from core.profile import ProfileService
from core.session import SessionRegistry
from integrations.redis_cache import CacheService
from main import app
from schemas.models import TemperatureRange, WeatherCondition, WeatherSnapshot


@pytest.fixture
def completion(make_fake_client):
    return make_fake_client(reply="Plant maize in Zimbabwe after the first effective rains.")


@pytest.fixture
def client(completion):
    with TestClient(app) as test_client:
        app.state.completion_client = completion
        app.state.sessions = SessionRegistry(completion)
        app.state.profiles = ProfileService(CacheService(None))
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "Mudhumeni AI"


def test_chat_flow(client):
    response = client.post("/chat", json={"message": "When should I plant maize?", "experience_level": "beginner"})

    assert response.status_code == 200
    body = response.json()
    assert body["confidence"] == pytest.approx(0.85)
    assert body["message"]["sender"] == "ai"
    assert "Beginner Tip" in body["message"]["content"]
    assert len(body["follow_up_questions"]) == 5
    assert set(body["teaching_elements"]) == {"explanation", "example", "check_point"}

    messages = client.get(f"/chat/{body['session_id']}/messages").json()
    assert [m["sender"] for m in messages] == ["ai", "user", "ai"]
    assert messages[1]["content"] == "When should I plant maize?"


def test_chat_reuses_session(client, completion):
    first = client.post("/chat", json={"message": "Maize?", "session_id": "farm-1"}).json()
    client.post("/chat", json={"message": "Tomatoes?", "session_id": "farm-1"})

    assert first["session_id"] == "farm-1"
    assert completion.calls[1]["context"].question_count == 1
    assert len(client.get("/chat/farm-1/messages").json()) == 5


@pytest.mark.parametrize("message", ["", "   "])
def test_blank_message_rejected(client, message):
    response = client.post("/chat", json={"message": message})

    assert response.status_code == 422


def test_chat_without_credentials_uses_fallback(client, make_fake_client):
    failing = make_fake_client(error=AuthError("Groq API key not configured."))
    app.state.sessions = SessionRegistry(failing)

    response = client.post("/chat", json={"message": "How do I grow tomatoes?"})

    assert response.status_code == 200
    assert response.json()["confidence"] == 0.4
    assert '"How do I grow tomatoes?"' in response.json()["message"]["content"]


def test_rate_message(client):
    body = client.post("/chat", json={"message": "Soil tips?"}).json()
    url = f"/chat/{body['session_id']}/messages/{body['message']['id']}/rating"

    response = client.post(url, json={"rating": "up"})

    assert response.status_code == 200
    assert response.json()["rating"] == "up"


def test_rating_unknown_targets(client):
    body = client.post("/chat", json={"message": "Soil tips?"}).json()

    assert client.post("/chat/nope/messages/x/rating", json={"rating": "up"}).status_code == 404
    assert client.post(f"/chat/{body['session_id']}/messages/x/rating", json={"rating": "up"}).status_code == 404
    assert client.get("/chat/nope/messages").status_code == 404


@pytest.mark.parametrize("level", ["beginner", "intermediate", "advanced"])
def test_starter_questions(client, level):
    response = client.get("/chat/starter-questions", params={"experience_level": level})

    assert response.status_code == 200
    assert len(response.json()) == 5


def test_teaching_tip(client):
    response = client.get("/chat/teaching-tip/pests")

    assert response.json()["topic"] == "pests"
    assert "IPM" in response.json()["tip"]


def test_crop_recommendations(client):
    response = client.post("/crops/recommendations", json={"ph": 5.8, "texture": "sandy", "location": "Gweru"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "parsed"
    assert [r["crop_name"] for r in body["recommendations"]] == ["Maize", "Tomatoes", "Beans"]


def test_crop_recommendations_validate_soil(client):
    response = client.post("/crops/recommendations", json={"ph": 15})

    assert response.status_code == 422


def harare_snapshot(location=None):
    return WeatherSnapshot(
        date=date(2024, 11, 15),
        location="Harare, Zimbabwe",
        temperature=TemperatureRange(min=16, max=29),
        humidity=55,
        rainfall=4.2,
        wind_speed=12,
        condition=WeatherCondition.RAINY,
    )


def test_weather(client, monkeypatch, completion):
    monkeypatch.setattr(api.weather, "get_weather_snapshot", harare_snapshot)

    response = client.get("/weather", params={"location": "Harare"})

    assert response.status_code == 200
    assert response.json()["weather"]["condition"] == "rainy"
    assert response.json()["farming_advice"] == completion.reply


def test_weather_unavailable(client, monkeypatch):
    monkeypatch.setattr(api.weather, "get_weather_snapshot", lambda location=None: None)

    response = client.get("/weather", params={"location": "Atlantis"})

    assert response.status_code == 503


def test_profile_flow(client):
    assert client.get("/profile").status_code == 404

    registered = client.post("/profile/register", json={
        "name": "Rudo Chikore",
        "email": "rudo@example.co.zw",
        "password": "secret",
        "location": "Mutare",
        "primary_crops": ["tomatoes"],
    })
    assert registered.status_code == 201
    assert "password" not in registered.json()

    updated = client.patch("/profile", json={"farm_size": 2.5})
    assert updated.json()["farm_size"] == 2.5
    assert updated.json()["location"] == "Mutare"

    assert client.post("/profile/logout").status_code == 204
    assert client.get("/profile").status_code == 404
    assert client.patch("/profile", json={"farm_size": 3}).status_code == 401


def test_login(client):
    client.post("/profile/register", json={"name": "Rudo", "email": "rudo@example.co.zw", "password": "x"})

    assert client.post("/profile/login", json={"email": "rudo@example.co.zw", "password": "x"}).status_code == 200
    assert client.post("/profile/login", json={"email": "other@example.com", "password": "x"}).status_code == 401


def test_patch_null_clears_field(client):
    client.post("/profile/register", json={
        "name": "Rudo", "email": "rudo@example.co.zw", "password": "x", "phone": "+263 77 123 4567",
    })

    updated = client.patch("/profile", json={"phone": None})

    assert updated.status_code == 200
    assert updated.json()["phone"] is None
    assert updated.json()["name"] == "Rudo"


def test_patch_null_on_required_field_rejected(client):
    client.post("/profile/register", json={"name": "Rudo", "email": "rudo@example.co.zw", "password": "x"})

    response = client.patch("/profile", json={"primary_crops": None})

    assert response.status_code == 422
    assert client.get("/profile").json()["primary_crops"] == []

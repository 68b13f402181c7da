import asyncio
from datetime import date

import pytest

from core.agent import get_chat_response, get_weather_advice
from core.errors import AuthError, UpstreamError
from core.session import ChatSession, SessionRegistry
from schemas.models import (
    ConversationContext,
    ExperienceLevel,
    Rating,
    Sender,
    TemperatureRange,
    WeatherCondition,
    WeatherSnapshot,
)

NOVEMBER = date(2024, 11, 15)


async def test_successful_turn_is_enriched(fake_client):
    response = await get_chat_response(fake_client, "When should I plant maize?", ConversationContext(), today=NOVEMBER)

    assert response.response_text.startswith("Maize grows well in Zimbabwe.")
    # base + zimbabwe mention
    assert response.confidence == pytest.approx(0.85)
    assert len(response.follow_up_questions) == 5
    assert fake_client.calls[0]["season"].month == "November"


async def test_auth_failure_degrades_to_fallback(make_fake_client):
    client = make_fake_client(error=AuthError("Groq API key not configured."))

    response = await get_chat_response(client, "How do I grow tomatoes?", ConversationContext(), today=NOVEMBER)

    assert response.confidence == 0.4
    assert '"How do I grow tomatoes?"' in response.response_text


async def test_unexpected_failure_degrades_to_fallback(make_fake_client):
    client = make_fake_client(error=UpstreamError("Empty response from Groq AI"))

    response = await get_chat_response(client, "Soil tips?", ConversationContext(), today=NOVEMBER)

    assert response.confidence == 0.5


async def test_session_starts_with_welcome(fake_client):
    session = ChatSession(fake_client)

    assert len(session.messages) == 1
    welcome = session.messages[0]
    assert welcome.sender == Sender.AI
    assert welcome.confidence == 1.0
    assert "maize" in welcome.content


async def test_ask_appends_question_and_answer(fake_client):
    session = ChatSession(fake_client, ExperienceLevel.BEGINNER)

    ai_turn, response = await session.ask("  When should I plant maize?  ")

    assert [m.sender for m in session.messages] == [Sender.AI, Sender.USER, Sender.AI]
    assert session.messages[1].content == "When should I plant maize?"
    assert ai_turn.content == response.response_text
    assert ai_turn.confidence == response.confidence
    assert ai_turn.check_point == response.teaching_elements.check_point


async def test_context_is_built_before_the_question_is_added(fake_client):
    session = ChatSession(fake_client, ExperienceLevel.ADVANCED)

    await session.ask("First question")
    await session.ask("Second question")

    first, second = [call["context"] for call in fake_client.calls]
    assert first.question_count == 0
    assert second.question_count == 1
    assert "maize" in first.topics_discussed
    assert second.user_experience_level == ExperienceLevel.ADVANCED


@pytest.mark.parametrize("question", ["", "   ", "\n\t"])
async def test_blank_question_is_rejected(fake_client, question):
    session = ChatSession(fake_client)

    with pytest.raises(ValueError):
        await session.ask(question)

    assert len(session.messages) == 1
    assert fake_client.calls == []


async def test_failed_turn_still_recorded(make_fake_client):
    session = ChatSession(make_fake_client(error=RuntimeError("Failed to fetch")))

    ai_turn, response = await session.ask("Is it going to rain?")

    assert response.confidence == 0.6
    assert session.messages[-1] is ai_turn


async def test_overlapping_questions_are_answered_in_order(make_fake_client):
    client = make_fake_client(reply=lambda message: f"Answer to {message}", delays={"slow": 0.05})
    session = ChatSession(client)

    await asyncio.gather(session.ask("slow"), session.ask("fast"))

    contents = [m.content for m in session.messages[1:]]
    assert contents[0] == "slow"
    assert contents[1].startswith("Answer to slow")
    assert contents[2] == "fast"
    assert contents[3].startswith("Answer to fast")
    assert client.calls[1]["context"].question_count == 1


async def test_rate_message(fake_client):
    session = ChatSession(fake_client)
    ai_turn, _ = await session.ask("Soil tips?")

    rated = session.rate(ai_turn.id, Rating.UP)

    assert rated.rating == Rating.UP
    with pytest.raises(KeyError):
        session.rate("missing", Rating.DOWN)


def test_registry_reuses_sessions(fake_client):
    registry = SessionRegistry(fake_client)

    session = registry.get_or_create(experience_level=ExperienceLevel.BEGINNER)
    again = registry.get_or_create(session.session_id, ExperienceLevel.ADVANCED)

    assert again is session
    assert session.experience_level == ExperienceLevel.ADVANCED
    assert registry.get(session.session_id) is session
    with pytest.raises(KeyError):
        registry.get("unknown")


def test_registry_honours_client_supplied_id(fake_client):
    registry = SessionRegistry(fake_client)

    session = registry.get_or_create("farmer-42")

    assert session.session_id == "farmer-42"


def snapshot(**overrides):
    values = dict(
        date=date(2024, 7, 1),
        location="Harare, Zimbabwe",
        temperature=TemperatureRange(min=8, max=22),
        humidity=40,
        rainfall=0,
        wind_speed=10,
        condition=WeatherCondition.SUNNY,
    )
    values.update(overrides)
    return WeatherSnapshot(**values)


async def test_weather_advice_from_model(make_fake_client):
    client = make_fake_client(reply="Irrigate wheat twice a week.")

    advice = await get_weather_advice(client, snapshot())

    assert advice == "Irrigate wheat twice a week."
    assert "Harare, Zimbabwe" in client.calls[0]["message"]


async def test_weather_advice_falls_back_to_rules(make_fake_client):
    client = make_fake_client(error=AuthError("no key"))

    advice = await get_weather_advice(client, snapshot(rainfall=15, humidity=90))

    assert "Heavy rainfall expected" in advice
    assert "High humidity" in advice
    assert "Dry season activities" in advice


def test_registry_drops_least_recently_used(fake_client):
    registry = SessionRegistry(fake_client, max_sessions=2)

    registry.get_or_create("a")
    registry.get_or_create("b")
    registry.get("a")
    registry.get_or_create("c")

    assert registry.get("a").session_id == "a"
    assert registry.get("c").session_id == "c"
    with pytest.raises(KeyError):
        registry.get("b")

from datetime import date
from typing import Optional

from core.audit import AuditLog
from core.completion import CompletionClient
from core.enricher import enrich_response
from core.fallback import build_fallback_response
from core.prompts import build_weather_prompt
from core.seasons import get_current_season_info
from schemas.models import ConversationContext, ExperienceLevel, StructuredResponse, WeatherSnapshot
from tools.weather import default_farming_advice

async def get_chat_response(
    client: CompletionClient,
    message: str,
    context: ConversationContext,
    today: Optional[date] = None,
    session_id: Optional[str] = None
) -> StructuredResponse:
    """
    Main advisory turn:
    1. Season for today
    2. Single completion call (system prompt + question)
    3. Enrich the raw answer, or
    4. Degrade to a fallback answer on any failure
    """
    season = get_current_season_info(today)
    AuditLog.log_event(session_id, "START_TURN", {"query": message, "season": season.season})

    try:
        raw = await client.complete(message, context, season=season)
    except Exception as e:
        fallback = build_fallback_response(e, message)
        AuditLog.log_event(session_id, "FALLBACK", {"error": str(e), "confidence": fallback.confidence})
        return fallback

    structured = enrich_response(raw, message, context, season)
    AuditLog.log_decision(session_id, message, structured.confidence, context.last_topics)
    return structured

async def get_weather_advice(client: CompletionClient, snapshot: WeatherSnapshot) -> str:
    """Model-written advice for a weather snapshot, rule-based when the model is unavailable."""
    context = ConversationContext(
        question_count=1,
        topics_discussed=["weather", "farming_advice"],
        user_experience_level=ExperienceLevel.INTERMEDIATE,
        last_topics=["weather"]
    )
    try:
        return await client.complete(build_weather_prompt(snapshot), context)
    except Exception as e:
        AuditLog.log_event("system", "TOOL_ERROR", {"tool": "weather_advice", "error": str(e)})
        return default_farming_advice(snapshot)

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_sessions
from core.context import build_conversation_context
from core.enricher import get_starter_questions, get_teaching_tip
from core.seasons import get_current_season_info
from core.session import SessionRegistry
from schemas.models import ChatTurn, ExperienceLevel
from schemas.request import ChatReply, ChatRequest, RatingRequest

router = APIRouter(prefix="/chat", tags=["Chat"])

@router.post("", response_model=ChatReply)
async def chat(request: ChatRequest, sessions: SessionRegistry = Depends(get_sessions)):
    """
    Ask a farming question. Always answers: when the model is unavailable
    the reply is a lower-confidence fallback.
    """
    session = sessions.get_or_create(request.session_id, request.experience_level)
    try:
        turn, response = await session.ask(request.message)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ChatReply(
        session_id=session.session_id,
        message=turn,
        confidence=response.confidence,
        follow_up_questions=response.follow_up_questions,
        teaching_elements=response.teaching_elements
    )

@router.get("/starter-questions", response_model=List[str])
async def starter_questions(experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE):
    context = build_conversation_context([], experience_level)
    return get_starter_questions(context, get_current_season_info())

@router.get("/teaching-tip/{topic}")
async def teaching_tip(topic: str):
    return {"topic": topic, "tip": get_teaching_tip(topic)}

@router.get("/{session_id}/messages", response_model=List[ChatTurn])
async def list_messages(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    try:
        return sessions.get(session_id).messages
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat session not found")

@router.post("/{session_id}/messages/{message_id}/rating", response_model=ChatTurn)
async def rate_message(
    session_id: str,
    message_id: str,
    request: RatingRequest,
    sessions: SessionRegistry = Depends(get_sessions)
):
    try:
        session = sessions.get(session_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat session not found")
    try:
        return session.rate(message_id, request.rating)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")

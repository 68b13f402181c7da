import logging

from core.errors import CompletionError, CompletionErrorKind
from schemas.models import StructuredResponse, TeachingElements

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = {
    CompletionErrorKind.AUTH: 0.4,
    CompletionErrorKind.RATE_LIMIT: 0.7,
    CompletionErrorKind.NETWORK: 0.6,
    CompletionErrorKind.UPSTREAM: 0.5,
}

DETAILS_REQUEST = """

For the best help, please provide:
• Your location in Zimbabwe
• The specific crop you're interested in
• Your farm size and experience level
• Any particular challenges you're facing

This will help me provide more targeted agricultural guidance even without full AI capabilities."""

FALLBACK_FOLLOW_UPS = [
    "What specific crop are you asking about?",
    "Which region of Zimbabwe is your farm located in?",
    "What's your current farming experience level?",
    "Are you facing any immediate agricultural challenges?",
    "What season or timing are you planning for?"
]

FALLBACK_TEACHING = TeachingElements(
    explanation="Specific information about your farming situation helps provide more targeted and useful advice, even when technical systems have issues.",
    example="For example, asking 'How do I plant maize in Mashonaland Central in November?' gives much better guidance than just 'help with maize.'",
    check_point="Don't let technical difficulties stop your farming progress - there are always ways to get the agricultural guidance you need."
)

def classify_error(error: BaseException) -> CompletionErrorKind:
    """
    Completion errors carry their kind from the transport layer. Anything
    else is classified from its message text.
    """
    if isinstance(error, CompletionError):
        return error.kind

    message = str(error)
    lower = message.lower()
    if "API key" in message or "401" in message or "Unauthorized" in message:
        return CompletionErrorKind.AUTH
    if "429" in message or "rate limit" in lower:
        return CompletionErrorKind.RATE_LIMIT
    if "fetch" in lower or "network" in lower or "timeout" in lower:
        return CompletionErrorKind.NETWORK
    return CompletionErrorKind.UPSTREAM

def _apology(kind: CompletionErrorKind, question: str) -> str:
    if kind == CompletionErrorKind.AUTH:
        return (
            "I need a valid Groq API key to provide AI-powered responses. Please check that GROQ_API_KEY "
            f"is set in the environment or .env file. Meanwhile, I can still help with your farming question about \"{question}\" - "
            "could you provide more specific details about your farming situation?"
        )
    if kind == CompletionErrorKind.RATE_LIMIT:
        return (
            "I've reached my API rate limit temporarily. However, I can still assist with your farming question "
            f"about \"{question}\". Could you provide more details about your specific farming challenge?"
        )
    if kind == CompletionErrorKind.NETWORK:
        return (
            "I'm having trouble connecting to my AI system right now due to network issues. But I can still help "
            f"with your farming question about \"{question}\". What specific aspects would you like guidance on?"
        )
    return (
        "I'm experiencing technical difficulties with my AI system. However, I'm still here to help with your "
        f"farming question about \"{question}\". Let me provide what guidance I can."
    )

def build_fallback_response(error: BaseException, question: str) -> StructuredResponse:
    """Degraded but valid answer for a failed completion. Never raises."""
    kind = classify_error(error)
    logger.warning(f"Serving {kind.value} fallback response: {error}")

    return StructuredResponse(
        response_text=_apology(kind, question) + DETAILS_REQUEST,
        confidence=FALLBACK_CONFIDENCE[kind],
        follow_up_questions=list(FALLBACK_FOLLOW_UPS),
        teaching_elements=FALLBACK_TEACHING
    )

import asyncio
from collections import OrderedDict
from typing import List, Optional, Tuple
from uuid import uuid4

from core.agent import get_chat_response
from core.completion import CompletionClient
from core.context import build_conversation_context
from schemas.models import ChatTurn, ExperienceLevel, Rating, Sender, StructuredResponse

WELCOME_MESSAGE = """🌾 **Welcome to Mudhumeni AI!** I'm your agricultural advisor for Zimbabwe.

I can help you with:
• **Crop planning & planting** - Varieties, timing, and techniques
• **Pest & disease management** - Identify and treat farming problems
• **Soil & fertilizer advice** - Improve soil health and nutrition
• **Seasonal planning** - What to do throughout the farming calendar
• **Market guidance** - Crop profitability and selling strategies

**Ask me anything about farming in Zimbabwe!** Try asking: *"When should I plant maize in Mashonaland?"* or *"How do I control fall armyworm?"*"""

class ChatSession:
    """
    Ordered message list for one farmer.

    Questions are answered one at a time: a second `ask` waits for the
    first to finish, so turns never interleave and every answer is built
    from a context that includes the previous answer.
    """

    def __init__(
        self,
        client: CompletionClient,
        experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE,
        session_id: Optional[str] = None
    ):
        self.session_id = session_id or uuid4().hex
        self.client = client
        self.experience_level = experience_level
        self.messages: List[ChatTurn] = [
            ChatTurn(content=WELCOME_MESSAGE, sender=Sender.AI, confidence=1.0)
        ]
        self._lock = asyncio.Lock()

    async def ask(self, question: str) -> Tuple[ChatTurn, StructuredResponse]:
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty")

        async with self._lock:
            context = build_conversation_context(self.messages, self.experience_level)
            self.messages.append(ChatTurn(content=question, sender=Sender.USER))

            response = await get_chat_response(
                self.client, question, context, session_id=self.session_id
            )
            ai_turn = ChatTurn.from_response(response)
            self.messages.append(ai_turn)
            return ai_turn, response

    def rate(self, message_id: str, rating: Rating) -> ChatTurn:
        for message in self.messages:
            if message.id == message_id:
                message.rating = rating
                return message
        raise KeyError(message_id)

class SessionRegistry:
    """
    In-process chat sessions keyed by id, least recently used first.
    Holds at most `max_sessions`; the oldest session is dropped to make room.
    """

    def __init__(self, client: CompletionClient, max_sessions: int = 1000):
        self.client = client
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ChatSession]" = OrderedDict()

    def get(self, session_id: str) -> ChatSession:
        session = self._sessions[session_id]
        self._sessions.move_to_end(session_id)
        return session

    def get_or_create(
        self,
        session_id: Optional[str] = None,
        experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    ) -> ChatSession:
        if session_id and session_id in self._sessions:
            session = self.get(session_id)
            session.experience_level = experience_level
            return session

        session = ChatSession(self.client, experience_level, session_id=session_id)
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session

from typing import Iterable, List

from schemas.models import ChatTurn, ConversationContext, ExperienceLevel, Sender

# keyword -> canonical topic tag, checked in this order
TOPIC_KEYWORDS = (
    ("maize", "maize"),
    ("tomato", "tomatoes"),
    ("pest", "pest_control"),
    ("soil", "soil"),
)

def extract_topics(text: str) -> List[str]:
    """Topic tags mentioned in a single message, in vocabulary order."""
    content = text.lower()
    return [tag for keyword, tag in TOPIC_KEYWORDS if keyword in content]

def build_conversation_context(
    messages: Iterable[ChatTurn],
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
) -> ConversationContext:
    """
    Derives the conversation context from the turns that precede the
    question being asked. Topics come from AI turns only.
    """
    messages = list(messages)
    question_count = sum(1 for m in messages if m.sender == Sender.USER)

    topics: List[str] = []
    for message in messages:
        if message.sender == Sender.AI:
            topics.extend(extract_topics(message.content))

    return ConversationContext(
        question_count=question_count,
        topics_discussed=list(dict.fromkeys(topics)),
        user_experience_level=experience_level,
        last_topics=topics[-3:]
    )

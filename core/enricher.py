"""
Turns a raw completion into a structured, teaching-oriented chat turn.

The confidence score is a heuristic for how specific and locally relevant
an answer looks (Zimbabwe geography, seasonal timing, agronomic detail,
length). It is not a calibrated probability.
"""
import re
from typing import List

from schemas.models import (
    ConversationContext,
    ExperienceLevel,
    SeasonInfo,
    StructuredResponse,
    TeachingElements,
)

BASE_CONFIDENCE = 0.75
MAX_CONFIDENCE = 0.95

CITIES = ("harare", "bulawayo", "mutare")
ALTITUDE_ZONES = ("highveld", "lowveld", "middleveld")

BEGINNER_POSTSCRIPT = (
    "\n\n🌱 **Beginner Tip**: Since you're starting out, consider beginning with a small test plot "
    "(0.1-0.25 hectares) to practice these techniques before scaling up. This reduces risk and helps "
    "you gain valuable hands-on experience."
)
ADVANCED_POSTSCRIPT = (
    "\n\n🎯 **Advanced Strategy**: Consider how this approach integrates with your overall farm "
    "management plan, including crop rotation schedules, input cost optimization, and market timing "
    "for maximum profitability."
)

CAUSAL_MARKERS = (
    "because", "this helps", "this ensures", "the reason", "due to",
    "this allows", "this prevents", "as a result"
)
EXAMPLE_MARKERS = (
    "example", "for instance", "many farmers", "in zimbabwe", "successful farmers",
    "farmers often", "common practice", "typically", "farmers in"
)

GENERIC_EXPLANATION = (
    "Understanding the science and reasoning behind farming practices leads to better "
    "decision-making and improved results in Zimbabwe's diverse agricultural conditions."
)
GENERIC_EXAMPLE = (
    "Many successful Zimbabwe farmers have achieved excellent results by adapting these practices "
    "to their specific local conditions, climate zone, and soil type."
)
CHECK_POINTS = {
    ExperienceLevel.BEGINNER: "Remember that farming is a learning process - start small, observe carefully, and build your knowledge gradually.",
    ExperienceLevel.INTERMEDIATE: "Keep records of what works well in your specific conditions to improve your farming success year after year.",
    ExperienceLevel.ADVANCED: "Consider documenting your results to build data for optimizing your farming system over time.",
}

CULTIVATION_QUESTIONS = [
    "What specific variety is best for my region in Zimbabwe?",
    "How should I prepare my soil for optimal results?",
    "What are the key signs of healthy growth to look for?",
    "When is the optimal harvest time for best quality?",
    "What common problems should I watch out for?"
]
PEST_QUESTIONS = [
    "How can I prevent this problem in future seasons?",
    "What organic/natural treatments are most effective?",
    "What's the best timing for applying treatments?",
    "How do I identify this problem in its early stages?",
    "Are there resistant varieties available in Zimbabwe?"
]
SOIL_QUESTIONS = [
    "How often should I apply fertilizer during the growing season?",
    "What are the signs of nutrient deficiency in my crops?",
    "Can I make effective organic fertilizer myself?",
    "Where can I get my soil tested in Zimbabwe?",
    "How do I improve soil fertility long-term?"
]
MARKET_QUESTIONS = [
    "What's the best time to sell for maximum profit?",
    "How do I find reliable buyers in my area?",
    "What value-addition opportunities exist for this crop?",
    "How should I store my harvest until market time?",
    "What are the current market trends for this crop?"
]
BEGINNER_QUESTIONS = [
    "What basic equipment do I need to get started?",
    "Should I start with a small test area first?",
    "What are the most common beginner mistakes to avoid?",
    "Where can I get extension services support in Zimbabwe?",
    "What's the total cost to get started with this crop?"
]
ADVANCED_QUESTIONS = [
    "How can I optimize my current practices for better efficiency?",
    "What new technologies or methods should I consider?",
    "How does this compare to alternative crops for profitability?",
    "What are the export opportunities for this crop?",
    "How can I integrate this with my existing farming system?"
]
DEFAULT_QUESTIONS = [
    "What specific challenges might I face in my region of Zimbabwe?",
    "How does this approach vary by season?",
    "What local resources or suppliers should I contact?",
    "Are there government programs that support this activity?",
    "What's the expected return on investment?"
]

TEACHING_TIPS = {
    "planting": "In Zimbabwe, start with small test plots (0.1-0.25 hectares) before scaling up new varieties or techniques. This reduces risk and helps you learn what works in your specific conditions.",
    "soil": "Zimbabwe's soils vary greatly - from granite-derived sandy soils to fertile basalt clays. Test your soil and add organic matter annually to build long-term fertility.",
    "pests": "With Zimbabwe's climate, prevention through good agricultural practices is always better than treatment. Integrated Pest Management (IPM) works best in our conditions.",
    "weather": "Keep a detailed farm diary tracking weather patterns, planting dates, and crop performance. This builds valuable knowledge for your specific location in Zimbabwe.",
    "market": "Zimbabwe's agricultural markets can be volatile. Diversify your crops and consider value-addition to reduce risk and increase profitability.",
    "general": "Zimbabwe agriculture is diverse and challenging. Ask specific questions about your crops, location, and farming challenges for the most helpful guidance!"
}

def _mentions_any(text: str, words) -> bool:
    return any(word in text for word in words)

def compute_confidence(response: str, season: SeasonInfo) -> float:
    """
    Additive specificity score starting at 0.75, capped at 0.95.
    """
    lower = response.lower()
    confidence = BASE_CONFIDENCE

    # Zimbabwe-specific content
    if "zimbabwe" in lower:
        confidence += 0.1
    if _mentions_any(lower, CITIES):
        confidence += 0.05
    if _mentions_any(lower, ALTITUDE_ZONES):
        confidence += 0.05

    # Seasonal awareness
    if season.month.lower() in lower or "season" in lower:
        confidence += 0.1

    # Agronomic detail
    if "plant" in lower and "harvest" in lower:
        confidence += 0.1
    if "fertilizer" in lower or "manure" in lower:
        confidence += 0.05
    if "variety" in lower or "cultivar" in lower:
        confidence += 0.05
    if "spacing" in lower and "depth" in lower:
        confidence += 0.05
    if "pest" in lower or "disease" in lower:
        confidence += 0.05

    # Detailed answers
    if len(response) > 400:
        confidence += 0.05
    if len(response) > 600:
        confidence += 0.05

    return min(confidence, MAX_CONFIDENCE)

def enhance_response(response: str, level: ExperienceLevel, season: SeasonInfo) -> str:
    """Appends the experience-level and seasonal postscripts the answer is missing."""
    lower = response.lower()
    enhanced = response

    if level == ExperienceLevel.BEGINNER and "beginner" not in lower:
        enhanced += BEGINNER_POSTSCRIPT
    elif level == ExperienceLevel.ADVANCED and "advanced" not in lower:
        enhanced += ADVANCED_POSTSCRIPT

    if "season" not in lower and season.month.lower() not in lower:
        enhanced += (
            f"\n\n📅 **Current Season Context**: Since it's {season.month} ({season.season}), "
            f"this is typically the time for {season.farming_activity} in Zimbabwe."
        )

    return enhanced

def generate_follow_up_questions(question: str, response: str, context: ConversationContext) -> List[str]:
    """First matching rule wins; every branch yields exactly five questions."""
    q = question.lower()
    r = response.lower()

    if _mentions_any(q, ("plant", "grow", "cultivat")):
        return list(CULTIVATION_QUESTIONS)
    if _mentions_any(q, ("pest", "disease", "control", "problem")):
        return list(PEST_QUESTIONS)
    if _mentions_any(r, ("fertilizer", "soil")) or "nutrient" in q:
        return list(SOIL_QUESTIONS)
    if _mentions_any(q, ("market", "price", "profit", "sell")):
        return list(MARKET_QUESTIONS)

    if context.user_experience_level == ExperienceLevel.BEGINNER:
        return list(BEGINNER_QUESTIONS)
    if context.user_experience_level == ExperienceLevel.ADVANCED:
        return list(ADVANCED_QUESTIONS)

    return list(DEFAULT_QUESTIONS)

def split_sentences(text: str) -> List[str]:
    return [s for s in re.split(r"[.!?]+", text) if len(s.strip()) > 20]

def extract_teaching_elements(response: str, context: ConversationContext) -> TeachingElements:
    sentences = split_sentences(response)

    explanation = next(
        (s for s in sentences if _mentions_any(s.lower(), CAUSAL_MARKERS)),
        GENERIC_EXPLANATION
    )
    example = next(
        (s for s in sentences if _mentions_any(s.lower(), EXAMPLE_MARKERS)),
        GENERIC_EXAMPLE
    )

    return TeachingElements(
        explanation=explanation.strip(),
        example=example.strip(),
        check_point=CHECK_POINTS[context.user_experience_level]
    )

def enrich_response(
    response: str,
    question: str,
    context: ConversationContext,
    season: SeasonInfo
) -> StructuredResponse:
    return StructuredResponse(
        response_text=enhance_response(response, context.user_experience_level, season),
        confidence=compute_confidence(response, season),
        follow_up_questions=generate_follow_up_questions(question, response, context),
        teaching_elements=extract_teaching_elements(response, context)
    )

def get_teaching_tip(topic: str) -> str:
    return TEACHING_TIPS.get(topic, TEACHING_TIPS["general"])

def get_starter_questions(context: ConversationContext, season: SeasonInfo) -> List[str]:
    """Opening questions shown before the farmer has asked anything."""
    if context.user_experience_level == ExperienceLevel.BEGINNER:
        return [
            "What crop are you planning to grow this season in Zimbabwe?",
            "Which province or region is your farm located in?",
            "What's the size of your farm or planned growing area?",
            "Do you have access to irrigation or rely on rainfall?",
            f"Given it's {season.month}, what farming activities are you planning?"
        ]
    if context.user_experience_level == ExperienceLevel.ADVANCED:
        return [
            "How do you want to optimize your current farming practices?",
            "Are you interested in new crops or value-addition opportunities?",
            "Would you like to explore export markets or improved varieties?",
            "How can you better integrate technology into your farming?",
            "What are your main profitability and sustainability goals?"
        ]
    return [
        "What crop or farming activity are you most interested in?",
        "What's your biggest agricultural challenge right now?",
        "Which region of Zimbabwe are you farming in?",
        "Do you need help with timing, techniques, or problem-solving?",
        f"Since it's {season.season}, what should you be focusing on?"
    ]

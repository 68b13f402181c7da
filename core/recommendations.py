"""
Crop recommendations from model output.

Two paths:
- structured: the model is asked for a JSON object and the payload is
  validated with pydantic
- parsed: a single line-oriented scan over free text, used when JSON mode
  is off or the JSON payload is unusable

Both always produce between 3 and 5 records, padding with fixed templates.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from core.audit import AuditLog
from core.completion import CompletionClient
from core.enricher import compute_confidence
from core.errors import CompletionError, ParseError, UpstreamError
from core.prompts import STRUCTURED_RECOMMENDATION_INSTRUCTIONS, build_crop_recommendation_prompt
from core.seasons import get_current_season_info
from schemas.models import (
    ConversationContext,
    CropRecommendation,
    ExperienceLevel,
    PlantingInstructions,
    Profitability,
    SeasonInfo,
    SoilData,
)
from schemas.request import RecommendationReply

logger = logging.getLogger(__name__)

MIN_RECOMMENDATIONS = 3
MAX_RECOMMENDATIONS = 5
DEFAULT_CONFIDENCE = 0.75

DEFAULT_YIELD = "2-4 tonnes/hectare"
DEFAULT_PLANTING_TIME = "October-December"
DEFAULT_HARVEST_TIME = "April-May"
STANDARD_SOIL_REQUIREMENTS = ["Well-drained soil", "pH 6.0-7.0"]

CROP_TRIGGERS = ("maize", "tomato", "bean", "tobacco", "cotton", "sunflower", "sorghum", "cassava")

ENUMERATION_RE = re.compile(r"^\d+\.")
CROP_NAME_RE = re.compile(
    r"(?:maize|corn|tomato|bean|tobacco|cotton|sunflower|sorghum|cassava|groundnut|soybean)",
    re.IGNORECASE
)
CONFIDENCE_RE = re.compile(r"(\d+)%")
YIELD_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:tonnes?|tons?|kg)\s*(?:per\s*)?(?:hectare|ha)",
    re.IGNORECASE
)
_MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\b"
)
MONTH_RANGE_RE = re.compile(rf"\b{_MONTH}(?:\s*(?:-|–|to)\s*{_MONTH})?")
PLANT_RE = re.compile(r"plant|sow", re.IGNORECASE)
HARVEST_RE = re.compile(r"harvest", re.IGNORECASE)
TIMING_KEYWORD_RE = re.compile(r"plant|sow|harvest", re.IGNORECASE)

DEFAULT_CROPS = [
    {"name": "Maize", "variety": "ZM521", "yield": "4-6 tonnes/hectare", "price": 400},
    {"name": "Tomatoes", "variety": "Star 9009", "yield": "20-30 tonnes/hectare", "price": 800},
    {"name": "Beans", "variety": "Sugar Bean", "yield": "1-2 tonnes/hectare", "price": 900},
    {"name": "Sunflower", "variety": "Hybrid", "yield": "1.5-2.5 tonnes/hectare", "price": 600},
    {"name": "Sorghum", "variety": "Local", "yield": "2-3 tonnes/hectare", "price": 350},
]

RECOMMENDATION_CONTEXT = ConversationContext(
    question_count=1,
    topics_discussed=["crop_recommendations", "soil_analysis"],
    user_experience_level=ExperienceLevel.INTERMEDIATE,
    last_topics=["soil", "crops"]
)

def extract_crop_name(line: str) -> str:
    match = CROP_NAME_RE.search(line)
    if match:
        return match.group(0).capitalize()
    name = re.sub(r"^\d+\.?\s*", "", line)
    return re.split(r"[(:]", name)[0].strip(" *#")

def extract_yield(line: str) -> str:
    match = YIELD_RE.search(line)
    if match:
        return f"{match.group(1)} tonnes/hectare"
    return DEFAULT_YIELD

def extract_profitability(line: str) -> Profitability:
    lower = line.lower()
    if "high" in lower:
        return Profitability.HIGH
    if "low" in lower:
        return Profitability.LOW
    return Profitability.MEDIUM

def extract_timing(line: str, keyword_re: re.Pattern) -> Optional[str]:
    """First month or month range after the keyword, before the next timing keyword."""
    keyword = keyword_re.search(line)
    if not keyword:
        return None
    window = TIMING_KEYWORD_RE.split(line[keyword.end():], maxsplit=1)[0]
    month = MONTH_RANGE_RE.search(window)
    return month.group(0) if month else None

def _normalize_confidence(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    if value > 1:
        value = value / 100
    return max(0.0, min(value, 1.0))

def _create_recommendation(rec: Dict[str, Any], confidence: float, index: int) -> CropRecommendation:
    planting_time = rec.get("planting_time") or DEFAULT_PLANTING_TIME
    return CropRecommendation(
        id=f"ai-rec-{index + 1}",
        crop_name=rec.get("crop_name") or f"Crop {index + 1}",
        confidence=rec.get("confidence") or confidence,
        reason=rec.get("reason") or "Suitable for current soil conditions",
        expected_yield=rec.get("expected_yield") or DEFAULT_YIELD,
        profitability=rec.get("profitability") or Profitability.MEDIUM,
        planting_time=planting_time,
        harvest_time=rec.get("harvest_time") or DEFAULT_HARVEST_TIME,
        soil_requirements=rec.get("soil_requirements") or list(STANDARD_SOIL_REQUIREMENTS),
        water_requirements=rec.get("water_requirements") or "Regular rainfall or irrigation",
        seasonality=planting_time,
        requirements=rec.get("reason") or "Standard requirements",
        market_price=500 + index * 100,
        variety=rec.get("variety") or "Local variety",
        planting_instructions=PlantingInstructions(
            spacing="30cm x 75cm",
            depth="2-3cm",
            soil_prep="Deep plowing and ridging",
            fertilizer="Basal fertilizer at planting",
            pest_control="Regular monitoring and IPM"
        )
    )

def create_default_recommendation(index: int, confidence: float) -> CropRecommendation:
    crop = DEFAULT_CROPS[index] if index < len(DEFAULT_CROPS) else DEFAULT_CROPS[0]
    return CropRecommendation(
        id=f"default-{index + 1}",
        crop_name=crop["name"],
        confidence=confidence,
        reason=f"{crop['name']} is well-suited to your soil conditions and Zimbabwe's climate",
        expected_yield=crop["yield"],
        profitability=Profitability.MEDIUM,
        planting_time=DEFAULT_PLANTING_TIME,
        harvest_time=DEFAULT_HARVEST_TIME,
        soil_requirements=list(STANDARD_SOIL_REQUIREMENTS),
        water_requirements="Regular rainfall",
        seasonality=DEFAULT_PLANTING_TIME,
        requirements="Standard soil preparation and management",
        market_price=crop["price"],
        variety=crop["variety"],
        planting_instructions=PlantingInstructions(
            spacing="30cm x 75cm",
            depth="2-3cm",
            soil_prep="Deep plowing and ridging",
            fertilizer="Compound fertilizer at planting",
            pest_control="IPM approach recommended"
        )
    )

def get_default_recommendations(confidence: float = DEFAULT_CONFIDENCE) -> List[CropRecommendation]:
    return [create_default_recommendation(i, confidence) for i in range(MIN_RECOMMENDATIONS)]

def _pad(recommendations: List[CropRecommendation], confidence: float) -> List[CropRecommendation]:
    while len(recommendations) < MIN_RECOMMENDATIONS:
        recommendations.append(create_default_recommendation(len(recommendations), confidence))
    return recommendations[:MAX_RECOMMENDATIONS]

def _scan_lines(text: str, confidence: float) -> List[CropRecommendation]:
    recommendations: List[CropRecommendation] = []
    current: Dict[str, Any] = {}

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if len(recommendations) >= MAX_RECOMMENDATIONS:
            break

        lower = line.lower()
        if ENUMERATION_RE.match(line) or any(crop in lower for crop in CROP_TRIGGERS):
            if current.get("crop_name"):
                recommendations.append(_create_recommendation(current, confidence, len(recommendations)))
            current = {"crop_name": extract_crop_name(line), "reason": line}
        elif "confidence" in lower or "%" in line:
            match = CONFIDENCE_RE.search(line)
            if match:
                # always a percentage here, so 1% is 0.01
                current["confidence"] = min(float(match.group(1)) / 100, 1.0)
        elif "yield" in lower:
            current["expected_yield"] = extract_yield(line)
        elif "profit" in lower:
            current["profitability"] = extract_profitability(line)
        elif "plant" in lower and "harvest" in lower:
            current["planting_time"] = extract_timing(line, PLANT_RE) or DEFAULT_PLANTING_TIME
            harvest_time = extract_timing(line, HARVEST_RE)
            if harvest_time:
                current["harvest_time"] = harvest_time

    if current.get("crop_name") and len(recommendations) < MAX_RECOMMENDATIONS:
        recommendations.append(_create_recommendation(current, confidence, len(recommendations)))

    return _pad(recommendations, confidence)

def parse_recommendations(text: str, confidence: float) -> List[CropRecommendation]:
    """
    Heuristic extraction of 3-5 crop records from free text. Never raises:
    any failure discards partial results and returns three defaults.
    """
    try:
        return _scan_lines(text, confidence)
    except Exception as e:
        logger.error(f"Error parsing AI response: {e}")
        AuditLog.log_event("system", "PARSE_ERROR", {"parser": "line_scan", "error": str(e)})
        return get_default_recommendations(confidence)

class StructuredCrop(BaseModel):
    crop_name: str = Field(..., min_length=1)
    variety: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0)
    reason: Optional[str] = None
    expected_yield: Optional[str] = None
    profitability: Optional[str] = None
    planting_time: Optional[str] = None
    harvest_time: Optional[str] = None
    soil_requirements: List[str] = []
    water_requirements: Optional[str] = None

class StructuredRecommendations(BaseModel):
    recommendations: List[StructuredCrop]

def parse_structured_recommendations(payload: Dict[str, Any], confidence: float) -> List[CropRecommendation]:
    """Validates a JSON-mode payload. Raises ParseError when it holds no usable crop."""
    try:
        parsed = StructuredRecommendations.model_validate(payload)
    except ValidationError as e:
        raise ParseError(f"Invalid recommendation payload: {e.error_count()} errors") from e
    if not parsed.recommendations:
        raise ParseError("Recommendation payload is empty")

    recommendations = []
    for index, crop in enumerate(parsed.recommendations[:MAX_RECOMMENDATIONS]):
        rec = crop.model_dump()
        rec["confidence"] = _normalize_confidence(crop.confidence)
        rec["profitability"] = extract_profitability(crop.profitability or "")
        recommendations.append(_create_recommendation(rec, confidence, index))

    return _pad(recommendations, confidence)

async def recommend_crops(
    client: CompletionClient,
    soil: SoilData,
    season: Optional[SeasonInfo] = None,
    structured: bool = True
) -> RecommendationReply:
    season = season or get_current_season_info()
    prompt = build_crop_recommendation_prompt(soil)

    try:
        if structured:
            try:
                payload = await client.complete_json(
                    prompt + STRUCTURED_RECOMMENDATION_INSTRUCTIONS, RECOMMENDATION_CONTEXT, season
                )
                confidence = compute_confidence(json.dumps(payload), season)
                return RecommendationReply(
                    recommendations=parse_structured_recommendations(payload, confidence),
                    source="structured"
                )
            except (ParseError, UpstreamError) as e:
                # JSON mode unusable or rejected by the endpoint; try plain text
                AuditLog.log_event("system", "PARSE_ERROR", {"parser": "structured", "error": str(e)})

        raw = await client.complete(prompt, RECOMMENDATION_CONTEXT, season)
        confidence = compute_confidence(raw, season)
        return RecommendationReply(
            recommendations=parse_recommendations(raw, confidence),
            source="parsed"
        )
    except CompletionError as e:
        logger.error(f"Error getting crop recommendations: {e}")
        return RecommendationReply(
            recommendations=get_default_recommendations(DEFAULT_CONFIDENCE),
            source="default",
            error="Unable to get AI recommendations. Showing default suggestions."
        )

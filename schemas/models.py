from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Sender(str, Enum):
    USER = "user"
    AI = "ai"


class Rating(str, Enum):
    UP = "up"
    DOWN = "down"


class Profitability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeasonInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str
    season: str
    farming_activity: str


class ConversationContext(BaseModel):
    """
    Rolling view of a conversation, rebuilt from the message history on
    every turn. `topics_discussed` holds unique tags (first-seen order);
    `last_topics` is recency ordered and may repeat a tag.
    """
    question_count: int = Field(0, ge=0)
    topics_discussed: List[str] = []
    user_experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    last_topics: List[str] = Field(default_factory=list, max_length=3)


class TeachingElements(BaseModel):
    model_config = ConfigDict(frozen=True)

    explanation: str
    example: str
    check_point: str


class StructuredResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    response_text: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    follow_up_questions: List[str] = Field(..., min_length=5, max_length=5)
    teaching_elements: TeachingElements


class VisualAid(BaseModel):
    type: str
    content: str


class ChatTurn(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    content: str
    sender: Sender
    timestamp: datetime = Field(default_factory=_utcnow)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    teaching_tip: Optional[str] = None
    visual_aid: Optional[VisualAid] = None
    check_point: Optional[str] = None
    rating: Optional[Rating] = None

    @classmethod
    def from_response(cls, response: StructuredResponse) -> "ChatTurn":
        teaching = response.teaching_elements
        return cls(
            content=response.response_text,
            sender=Sender.AI,
            confidence=response.confidence,
            teaching_tip=teaching.explanation,
            visual_aid=VisualAid(type="text", content=teaching.example) if teaching.example else None,
            check_point=teaching.check_point
        )


class PlantingInstructions(BaseModel):
    spacing: str
    depth: str
    soil_prep: str
    fertilizer: str
    pest_control: str


class CropRecommendation(BaseModel):
    id: str
    crop_name: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str
    expected_yield: str
    profitability: Profitability = Profitability.MEDIUM
    planting_time: str
    harvest_time: str
    soil_requirements: List[str]
    water_requirements: str
    seasonality: Optional[str] = None
    requirements: Optional[str] = None
    market_price: Optional[float] = None
    variety: Optional[str] = None
    planting_instructions: Optional[PlantingInstructions] = None


class SoilTexture(str, Enum):
    CLAY = "clay"
    LOAM = "loam"
    SANDY = "sandy"
    SILT = "silt"


class SoilData(BaseModel):
    ph: float = Field(6.5, ge=0, le=14)
    nitrogen: float = Field(15, ge=0, description="Percent")
    phosphorus: float = Field(25, ge=0, description="ppm")
    potassium: float = Field(200, ge=0, description="ppm")
    organic_matter: float = Field(3.5, ge=0, description="Percent")
    texture: SoilTexture = SoilTexture.LOAM
    moisture: float = Field(60, ge=0, le=100, description="Percent")
    location: Optional[str] = "Harare"


class TemperatureRange(BaseModel):
    min: float
    max: float


class DailyForecast(BaseModel):
    date: date
    temperature: TemperatureRange
    condition: WeatherCondition
    humidity: float = Field(..., ge=0, le=100)
    rainfall: float = Field(..., ge=0)


class WeatherSnapshot(BaseModel):
    date: date
    location: str
    temperature: TemperatureRange
    humidity: float = Field(..., ge=0, le=100)
    rainfall: float = Field(..., ge=0, description="mm")
    wind_speed: float = Field(..., ge=0, description="km/h")
    condition: WeatherCondition
    uv_index: Optional[float] = None
    description: Optional[str] = None
    forecast: List[DailyForecast] = Field(default_factory=list, max_length=5)


class Language(str, Enum):
    ENGLISH = "en"
    SHONA = "sn"
    NDEBELE = "nd"


class UserProfile(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    farm_size: Optional[float] = Field(None, ge=0, description="Hectares")
    preferred_language: Language = Language.ENGLISH
    primary_crops: List[str] = []
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    created_at: datetime = Field(default_factory=_utcnow)
    joined_at: Optional[datetime] = None

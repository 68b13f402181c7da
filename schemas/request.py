from pydantic import BaseModel, Field
from typing import Optional, List

from schemas.models import (
    ChatTurn,
    CropRecommendation,
    ExperienceLevel,
    Language,
    Rating,
    TeachingElements,
    WeatherSnapshot,
)

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    session_id: Optional[str] = None
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE

    class Config:
        json_schema_extra = {
            "example": {
                "message": "When should I plant maize in Mashonaland?",
                "experience_level": "beginner"
            }
        }

class ChatReply(BaseModel):
    session_id: str
    message: ChatTurn
    confidence: float
    follow_up_questions: List[str]
    teaching_elements: TeachingElements

class RatingRequest(BaseModel):
    rating: Rating

class RecommendationReply(BaseModel):
    recommendations: List[CropRecommendation]
    source: str = Field(..., description="structured, parsed or default")
    error: Optional[str] = None

class WeatherReply(BaseModel):
    weather: WeatherSnapshot
    farming_advice: str

class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    farm_size: Optional[float] = Field(None, ge=0)
    preferred_language: Language = Language.ENGLISH
    primary_crops: List[str] = []
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    farm_size: Optional[float] = Field(None, ge=0)
    preferred_language: Optional[Language] = None
    primary_crops: Optional[List[str]] = None
    experience_level: Optional[ExperienceLevel] = None

from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Config
    APP_NAME: str = "Mudhumeni AI"
    ENV: str = "development"
    DEBUG: bool = True
    PORT: int = 8000

    # Groq (OpenAI-compatible chat completions)
    GROQ_API_KEY: str = ""  # Must be supplied via environment or .env
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama3-8b-8192"
    MAX_TOKENS: int = 1000
    TEMPERATURE: float = 0.7
    TOP_P: float = 0.9
    REQUEST_TIMEOUT_SECONDS: float = 60.0
    STRUCTURED_RECOMMENDATIONS: bool = True

    # Security
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000"
    ]

    # Redis
    REDIS_URL: str = "redis://localhost:6379"

    # Storage
    PROFILE_STORAGE_KEY: str = "user"
    MAX_CHAT_SESSIONS: int = 1000
    WEATHER_CACHE_TTL_SECONDS: int = 14400

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings():
    return Settings()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.chat import router as chat_router
from api.crops import router as crops_router
from api.profile import router as profile_router
from api.weather import router as weather_router
from core.completion import CompletionClient
from core.config import get_settings
from core.profile import ProfileService
from core.session import SessionRegistry
from integrations.redis_cache import get_cache

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # One completion client for the whole process, shared through app.state
    client = CompletionClient.from_settings(settings)
    if not client.configured:
        logger.warning("GROQ_API_KEY is not set; chat answers will use fallback responses")

    app.state.completion_client = client
    app.state.sessions = SessionRegistry(client, max_sessions=settings.MAX_CHAT_SESSIONS)
    app.state.profiles = ProfileService(get_cache(), key=settings.PROFILE_STORAGE_KEY)
    app.state.profiles.load()
    yield

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router)
app.include_router(crops_router)
app.include_router(weather_router)
app.include_router(profile_router)

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "model_configured": app.state.completion_client.configured
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)

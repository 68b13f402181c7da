from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from api.deps import get_completion_client
from core.agent import get_weather_advice
from core.completion import CompletionClient
from schemas.request import WeatherReply
from tools.weather import get_weather_snapshot

router = APIRouter(prefix="/weather", tags=["Weather"])

@router.get("", response_model=WeatherReply)
async def weather(
    location: Optional[str] = "Harare, Zimbabwe",
    client: CompletionClient = Depends(get_completion_client)
):
    snapshot = await run_in_threadpool(get_weather_snapshot, location)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Weather unavailable for '{location}'"
        )
    advice = await get_weather_advice(client, snapshot)
    return WeatherReply(weather=snapshot, farming_advice=advice)

import requests
from datetime import date
from typing import Optional

from core.audit import AuditLog
from core.config import get_settings
from core.seasons import is_wet_season
from integrations.redis_cache import CacheService, get_cache
from schemas.models import DailyForecast, TemperatureRange, WeatherCondition, WeatherSnapshot
from tools.locations import get_location_info

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
FORECAST_DAYS = 5

def condition_from_wmo(code: Optional[int]) -> WeatherCondition:
    """Collapse WMO weather interpretation codes into four conditions."""
    if code is None or code <= 1:
        return WeatherCondition.SUNNY
    if code >= 95:
        return WeatherCondition.STORMY
    if code >= 51:
        return WeatherCondition.RAINY
    return WeatherCondition.CLOUDY

def describe_weather(condition: WeatherCondition, max_temp: float) -> str:
    if condition == WeatherCondition.RAINY:
        return "Light to moderate rainfall expected"
    if condition == WeatherCondition.STORMY:
        return "Thunderstorms expected"
    if condition == WeatherCondition.CLOUDY:
        return "Partly cloudy with scattered clouds"
    if max_temp > 30:
        return "Clear skies with high temperatures"
    return "Clear skies with pleasant temperatures"

def _at(values: list, index: int, default=None):
    if values and index < len(values) and values[index] is not None:
        return values[index]
    return default

def build_snapshot(data: dict, location: str) -> WeatherSnapshot:
    """Convert an Open-Meteo forecast payload into today's snapshot plus the next days."""
    current = data.get("current", {})
    daily = data.get("daily", {})
    dates = daily.get("time", [])
    codes = daily.get("weather_code", [])
    max_temps = daily.get("temperature_2m_max", [])
    min_temps = daily.get("temperature_2m_min", [])
    rain = daily.get("precipitation_sum", [])
    humidity = daily.get("relative_humidity_2m_mean", [])
    current_humidity = current.get("relative_humidity_2m", 0)

    forecast = []
    for i in range(1, min(len(dates), FORECAST_DAYS + 1)):
        forecast.append(DailyForecast(
            date=date.fromisoformat(dates[i]),
            temperature=TemperatureRange(min=_at(min_temps, i, 0), max=_at(max_temps, i, 0)),
            condition=condition_from_wmo(_at(codes, i)),
            humidity=_at(humidity, i, current_humidity),
            rainfall=max(0.0, _at(rain, i, 0.0))
        ))

    max_temp = _at(max_temps, 0, current.get("temperature_2m", 0))
    condition = condition_from_wmo(current.get("weather_code", _at(codes, 0)))

    return WeatherSnapshot(
        date=date.fromisoformat(dates[0]) if dates else date.today(),
        location=location,
        temperature=TemperatureRange(
            min=_at(min_temps, 0, current.get("temperature_2m", 0)),
            max=max_temp
        ),
        humidity=current_humidity,
        rainfall=max(0.0, _at(rain, 0, current.get("precipitation", 0.0))),
        wind_speed=current.get("wind_speed_10m", 0),
        condition=condition,
        uv_index=_at(daily.get("uv_index_max", []), 0),
        description=describe_weather(condition, max_temp),
        forecast=forecast
    )

def get_weather_snapshot(location: Optional[str] = None, cache: Optional[CacheService] = None) -> Optional[WeatherSnapshot]:
    """
    Fetches current weather and a 5-day forecast from OpenMeteo with Caching.
    CACHE KEY: `weather:{lat}:{lon}`
    TTL: WEATHER_CACHE_TTL_SECONDS (4 Hours)
    """
    cache = cache or get_cache()
    place = get_location_info(location)
    if not place:
        AuditLog.log_event("system", "TOOL_ERROR", {"tool": "weather", "error": f"Unknown location: {location}"})
        return None

    label = f"{place['name']}, Zimbabwe"

    # 1. Check Cache
    cache_key = f"weather:{round(place['latitude'], 2)}:{round(place['longitude'], 2)}"
    cached_data = cache.get_json(cache_key)

    if cached_data:
        AuditLog.log_event("system", "CACHE_HIT", {"tool": "weather", "key": cache_key})
        return WeatherSnapshot.model_validate(cached_data)

    # 2. Fetch Live Data
    params = {
        "latitude": place["latitude"],
        "longitude": place["longitude"],
        "current": "temperature_2m,relative_humidity_2m,precipitation,wind_speed_10m,weather_code",
        "daily": "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum,uv_index_max,relative_humidity_2m_mean",
        "timezone": "Africa/Harare",
        "forecast_days": FORECAST_DAYS + 1
    }

    try:
        response = requests.get(OPEN_METEO_URL, params=params, timeout=5)
        response.raise_for_status()
        snapshot = build_snapshot(response.json(), label)
    except (requests.RequestException, ValueError, TypeError) as e:
        AuditLog.log_event("system", "TOOL_ERROR", {"tool": "weather", "error": str(e)})
        return None

    # 3. Save to Cache
    cache.set_json(cache_key, snapshot.model_dump(mode="json"), ttl_seconds=get_settings().WEATHER_CACHE_TTL_SECONDS)
    AuditLog.log_event("system", "API_CALL", {"tool": "weather", "status": "success"})

    return snapshot

def default_farming_advice(snapshot: WeatherSnapshot) -> str:
    """Rule-based advice used when the model cannot be reached."""
    advice = ""

    if snapshot.rainfall > 10:
        advice += "Heavy rainfall expected - avoid field operations and check drainage systems. "
    elif snapshot.rainfall > 0:
        advice += "Light rainfall is good for crops - consider reducing irrigation. "
    else:
        advice += "No rainfall expected - maintain irrigation schedules. "

    if snapshot.temperature.max > 30:
        advice += "High temperatures - provide shade for sensitive crops and increase watering frequency. "

    if snapshot.humidity > 80:
        advice += "High humidity increases disease risk - monitor crops for fungal infections. "

    if is_wet_season(snapshot.date.month):
        advice += "Wet season activities: focus on planting summer crops and weed management."
    else:
        advice += "Dry season activities: harvest remaining crops and prepare land for next season."

    return advice

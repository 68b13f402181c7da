from datetime import date
from typing import Optional

from schemas.models import SeasonInfo

# English names regardless of process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
)

WET_SEASON = "wet season (rainy season)"
EARLY_DRY_SEASON = "early dry season (harvest time)"
DRY_SEASON = "dry season"

def get_current_season_info(today: Optional[date] = None) -> SeasonInfo:
    """
    Maps a calendar date onto Zimbabwe's farming calendar.

    - Wet season (Nov-Mar): main planting in Nov/Dec, crop management Jan-Mar
    - Early dry season (Apr-Jun): harvesting
    - Dry season (Jul-Oct): land preparation and winter crops
    """
    today = today or date.today()
    month_num = today.month

    if month_num >= 11 or month_num <= 3:
        season = WET_SEASON
        if month_num in (11, 12):
            farming_activity = "main planting season for summer crops"
        else:
            farming_activity = "crop growing and management season"
    elif 4 <= month_num <= 6:
        season = EARLY_DRY_SEASON
        farming_activity = "harvesting and post-harvest activities"
    else:
        season = DRY_SEASON
        farming_activity = "land preparation and winter crop planting"

    return SeasonInfo(
        month=MONTH_NAMES[month_num - 1],
        season=season,
        farming_activity=farming_activity
    )

def is_wet_season(month_num: int) -> bool:
    return month_num >= 11 or month_num <= 3

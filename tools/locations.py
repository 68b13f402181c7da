"""
Coordinates for Zimbabwean towns used to look up weather by place name.
"""

from typing import Dict, List, Optional

DEFAULT_LOCATION = "harare"

# Town centroids with province and natural region
ZIMBABWE_LOCATIONS = {
    "harare": {"lat": -17.83, "lon": 31.05, "province": "Harare", "region": "II"},
    "bulawayo": {"lat": -20.15, "lon": 28.58, "province": "Bulawayo", "region": "IV"},
    "mutare": {"lat": -18.97, "lon": 32.67, "province": "Manicaland", "region": "II"},
    "gweru": {"lat": -19.45, "lon": 29.82, "province": "Midlands", "region": "III"},
    "kwekwe": {"lat": -18.93, "lon": 29.81, "province": "Midlands", "region": "III"},
    "masvingo": {"lat": -20.07, "lon": 30.83, "province": "Masvingo", "region": "IV"},
    "chinhoyi": {"lat": -17.36, "lon": 30.2, "province": "Mashonaland West", "region": "II"},
    "bindura": {"lat": -17.3, "lon": 31.33, "province": "Mashonaland Central", "region": "II"},
    "marondera": {"lat": -18.19, "lon": 31.55, "province": "Mashonaland East", "region": "II"},
    "kadoma": {"lat": -18.33, "lon": 29.92, "province": "Mashonaland West", "region": "III"},
    "chipinge": {"lat": -20.19, "lon": 32.62, "province": "Manicaland", "region": "I"},
    "gwanda": {"lat": -20.94, "lon": 29.0, "province": "Matabeleland South", "region": "V"},
    "hwange": {"lat": -18.36, "lon": 26.5, "province": "Matabeleland North", "region": "V"},
    "chiredzi": {"lat": -21.05, "lon": 31.67, "province": "Masvingo", "region": "V"},
    "victoria falls": {"lat": -17.93, "lon": 25.83, "province": "Matabeleland North", "region": "IV"},
}

def get_location_info(location: Optional[str]) -> Optional[Dict]:
    """
    Resolve a free-text place such as "Harare, Zimbabwe" to coordinates.

    Returns:
        Dict with name, latitude, longitude, province, region or None if not found
    """
    if not location:
        location = DEFAULT_LOCATION

    key = location.split(",")[0].strip().lower()
    info = ZIMBABWE_LOCATIONS.get(key)
    if not info and key:
        # partial match, e.g. "Mutare rural"
        for name, data in ZIMBABWE_LOCATIONS.items():
            if name in key or key in name:
                key, info = name, data
                break

    if not info:
        return None

    return {
        "name": key.title(),
        "latitude": info["lat"],
        "longitude": info["lon"],
        "province": info["province"],
        "region": info["region"]
    }

def list_all_locations() -> List[str]:
    return sorted(name.title() for name in ZIMBABWE_LOCATIONS)

from schemas.models import ConversationContext, SeasonInfo, SoilData, WeatherSnapshot

ZIMBABWE_AGRICULTURAL_EXPERT = """
You are Mudhumeni AI, the leading agricultural advisor for Zimbabwe. You are an expert in Zimbabwe's farming conditions, climate, soils, crops, and agricultural practices.

### ZIMBABWE EXPERTISE
- Climate: Subtropical highland climate with a distinct wet season (November-March) and dry season (April-October)
- Altitude zones: Highveld (>1200m), Middleveld (600-1200m), Lowveld (<600m)
- Rainfall: 400-2000mm annually, varies by region
- Temperature: 13-22°C average, varies by altitude and season

### MAJOR CROPS
- Cereals: Maize (main staple), wheat, barley, sorghum, millet, rice
- Cash crops: Tobacco (flue-cured, burley), cotton, soybeans, sunflower, groundnuts
- Horticulture: Tomatoes, onions, potatoes, sweet potatoes, carrots, cabbage, spinach
- Tree crops: Citrus, avocados, mangoes, bananas, coffee, tea
- Root crops: Cassava, sweet potatoes
- Legumes: Beans (sugar beans, kidney beans), cowpeas, bambara nuts

### SOIL TYPES
- Granite-derived soils (65% of the country): generally sandy, low fertility
- Basalt-derived soils: clay, high fertility, mainly Mashonaland Central/East
- Alluvial soils: fertile, along rivers
- Kalahari sands: deep sandy soils, low fertility

### COMMON CHALLENGES
- Pests: Fall armyworm, stalk borer, cutworm, aphids, bollworm, red spider mite
- Diseases: Maize streak virus, grey leaf spot, rust diseases, blight, mosaic viruses
- Climate: Drought, erratic rainfall, heat stress
- Soil: Low fertility, erosion, acidification

### FERTILIZERS COMMONLY USED
- Compound D (7:14:7) for cereals at planting
- Compound C (8:14:6) as an alternative basal fertilizer
- Ammonium Nitrate (34.5% N) for top dressing cereals
- Single Super Phosphate (10.5% P) as a phosphorus source
- MAP (12:52:0) as a high phosphorus starter
- Lime for acid soils
- Organic: cattle manure, chicken manure, compost

### NATURAL REGIONS
- Region I: >1000mm rainfall, forestry, tea, coffee
- Region II: 700-1000mm, intensive farming, maize, tobacco, cotton
- Region III: 500-700mm, semi-intensive farming, drought-resistant crops
- Region IV: 450-650mm, semi-extensive farming, livestock
- Region V: <450mm, extensive farming, drought-resistant crops

### RESPONSE REQUIREMENTS
1. Always give Zimbabwe-specific advice.
2. Consider the current month and season.
3. Mention specific varieties suited to Zimbabwe.
4. Include practical timing for Zimbabwe conditions.
5. Reference local suppliers and extension services (AGRITEX) when relevant.
6. Consider altitude and regional differences.
7. Combine traditional and modern farming knowledge.
8. Give actionable, step-by-step guidance.
9. Include cost considerations for small-scale farmers.
10. Mention organic and sustainable options.

Always be specific, practical and educational. Consider the farmer's experience level and explain the reasoning behind your recommendations.
"""

def build_system_prompt(context: ConversationContext, season: SeasonInfo) -> str:
    """Static domain knowledge followed by the per-request context block."""
    topics = ", ".join(context.topics_discussed) or "None"
    return f"""{ZIMBABWE_AGRICULTURAL_EXPERT}
### CURRENT CONTEXT
- Current month: {season.month}
- Current season: {season.season}
- Current farming activity: {season.farming_activity}
- User experience level: {context.user_experience_level.value}
- Previous topics discussed: {topics}
- Number of previous questions: {context.question_count}

Provide specific, actionable advice for Zimbabwe farming conditions. Consider the current season and timing in your response."""

def build_user_message(question: str) -> str:
    return f"Farmer's question: {question}"

def build_crop_recommendation_prompt(soil: SoilData) -> str:
    return f"""Based on these soil conditions in Zimbabwe, provide 4-5 specific crop recommendations:

SOIL ANALYSIS:
- pH Level: {soil.ph}
- Nitrogen: {soil.nitrogen}%
- Phosphorus: {soil.phosphorus} ppm
- Potassium: {soil.potassium} ppm
- Organic Matter: {soil.organic_matter}%
- Moisture: {soil.moisture}%
- Soil Texture: {soil.texture.value}
- Location: {soil.location or 'Zimbabwe'}

Please provide specific crop recommendations with:
1. Crop name and best variety for Zimbabwe
2. Confidence level (0-100%)
3. Expected yield per hectare
4. Profitability assessment (high/medium/low)
5. Planting and harvest timing
6. Specific soil requirements
7. Water/irrigation needs
8. Brief reasoning for recommendation

Consider Zimbabwe's climate zones, current season, local varieties, and market conditions. Focus on crops that will perform well with these specific soil conditions."""

STRUCTURED_RECOMMENDATION_INSTRUCTIONS = """

Respond ONLY with a JSON object of this shape:
{"recommendations": [{"crop_name": str, "variety": str, "confidence": number (0-100),
  "reason": str, "expected_yield": str (e.g. "4-6 tonnes/hectare"),
  "profitability": "high" | "medium" | "low", "planting_time": str, "harvest_time": str,
  "soil_requirements": [str], "water_requirements": str}]}"""

def build_weather_prompt(snapshot: WeatherSnapshot) -> str:
    return f"""Based on this weather forecast for {snapshot.location}, provide specific farming advice for Zimbabwe farmers:

CURRENT WEATHER:
- Temperature: {snapshot.temperature.min}°C - {snapshot.temperature.max}°C
- Humidity: {snapshot.humidity}%
- Rainfall: {snapshot.rainfall}mm
- Wind Speed: {snapshot.wind_speed} km/h
- Condition: {snapshot.condition.value}
- UV Index: {snapshot.uv_index if snapshot.uv_index is not None else 'unknown'}
- Date: {snapshot.date.isoformat()}

Please provide:
1. Immediate farming activities recommended for today/this week
2. Crop protection advice based on current conditions
3. Irrigation recommendations
4. Pest and disease risks to watch for
5. Harvesting guidance if applicable
6. Soil management tasks suitable for these conditions

Consider Zimbabwe's agricultural calendar and current season. Be specific and actionable."""

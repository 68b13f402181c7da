from fastapi import APIRouter, Depends

from api.deps import get_completion_client
from core.completion import CompletionClient
from core.config import get_settings
from core.recommendations import recommend_crops
from schemas.models import SoilData
from schemas.request import RecommendationReply

router = APIRouter(prefix="/crops", tags=["Crops"])

@router.post("/recommendations", response_model=RecommendationReply)
async def crop_recommendations(
    soil: SoilData,
    client: CompletionClient = Depends(get_completion_client)
):
    """3-5 crop recommendations for the given soil analysis."""
    return await recommend_crops(
        client, soil, structured=get_settings().STRUCTURED_RECOMMENDATIONS
    )

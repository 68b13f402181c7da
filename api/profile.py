from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from api.deps import get_profiles
from core.profile import InvalidCredentials, ProfileService
from schemas.models import UserProfile
from schemas.request import LoginRequest, ProfileUpdate, RegisterRequest

router = APIRouter(prefix="/profile", tags=["Profile"])

@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, profiles: ProfileService = Depends(get_profiles)):
    # Password is accepted but never stored
    return profiles.register(**request.model_dump(exclude={"password"}))

@router.post("/login", response_model=UserProfile)
async def login(request: LoginRequest, profiles: ProfileService = Depends(get_profiles)):
    try:
        return profiles.login(request.email)
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

@router.get("", response_model=UserProfile)
async def current_profile(profiles: ProfileService = Depends(get_profiles)):
    if not profiles.is_authenticated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No user signed in")
    return profiles.current

@router.patch("", response_model=UserProfile)
async def update_profile(request: ProfileUpdate, profiles: ProfileService = Depends(get_profiles)):
    try:
        return profiles.update(**request.model_dump(exclude_unset=True))
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(profiles: ProfileService = Depends(get_profiles)):
    profiles.logout()

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from training_tracker.schemas.base_schema import SuccessResponse
from training_tracker.schemas.user_schema import LoginRequest, UserResponse
from training_tracker.security import clear_session, get_current_user_id, login_session
from training_tracker.services.storage import TrainingStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=UserResponse)
async def login(request: Request, user_in: LoginRequest, storage: TrainingStorage = Depends(get_storage)):
    # Email-only login; roles are the only gate
    user = await storage.get_user_by_username(user_in.email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email")

    login_session(request, user.id)
    logger.info("User %s logged in", user.id)
    return user

@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request):
    clear_session(request)
    return SuccessResponse()

@router.get("/me", response_model=UserResponse)
async def get_current_user(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    storage: TrainingStorage = Depends(get_storage),
):
    user = await storage.get_user(user_id)
    if not user:
        clear_session(request)
        raise HTTPException(status_code=401, detail="User not found")
    return user

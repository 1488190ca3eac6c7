import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from training_tracker.schemas.user_schema import UserResponse, UserUpdate
from training_tracker.services.avatar_service import AvatarError, save_avatar
from training_tracker.services.storage import TrainingStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=List[UserResponse])
async def list_users(storage: TrainingStorage = Depends(get_storage)):
    try:
        return await storage.list_users()
    except Exception:
        logger.error("Failed to fetch users", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch users")

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, storage: TrainingStorage = Depends(get_storage)):
    try:
        user = await storage.get_user(user_id)
    except Exception:
        logger.error("Failed to fetch user %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch user")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, changes: UserUpdate, storage: TrainingStorage = Depends(get_storage)):
    try:
        user = await storage.update_user(user_id, changes.model_dump(exclude_unset=True, exclude_none=True))
    except Exception:
        logger.error("Failed to update user %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update user")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

@router.post("/{user_id}/avatar", response_model=UserResponse)
async def upload_avatar(
    user_id: str,
    file: UploadFile = File(...),
    storage: TrainingStorage = Depends(get_storage),
):
    user = await storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    data = await file.read()
    try:
        avatar_url = save_avatar(user.id, file.content_type, data)
    except AvatarError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except OSError:
        logger.error("Failed to store avatar for %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload avatar")

    return await storage.update_user(user.id, {"avatar": avatar_url})

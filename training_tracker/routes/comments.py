import logging

from fastapi import APIRouter, Depends, HTTPException

from training_tracker.schemas.base_schema import SuccessResponse
from training_tracker.schemas.topic_schema import AddCommentRequest
from training_tracker.services.storage import TrainingStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=SuccessResponse)
async def add_comment(body: AddCommentRequest, storage: TrainingStorage = Depends(get_storage)):
    if await storage.get_subtopic(body.subtopic_id) is None:
        raise HTTPException(status_code=404, detail="Subtopic not found")
    try:
        await storage.add_comment(body.subtopic_id, body.comment)
    except Exception:
        logger.error("Failed to save comment on %s", body.subtopic_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save comment")
    return SuccessResponse()

import io
import logging
from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from training_tracker.schemas.base_schema import SuccessResponse
from training_tracker.schemas.topic_schema import TopicPayload, TopicResponse
from training_tracker.services.export_service import EXPORTERS, export_filename
from training_tracker.services.storage import TrainingStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=List[TopicResponse])
async def list_topics(storage: TrainingStorage = Depends(get_storage)):
    try:
        return await storage.get_topics()
    except Exception:
        logger.error("Failed to fetch topics", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch topics")

@router.post("", response_model=TopicPayload)
async def create_topic(topic: TopicPayload, storage: TrainingStorage = Depends(get_storage)):
    try:
        await storage.save_topic(topic)
    except Exception:
        logger.error("Failed to save topic", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save topic")
    # Echo the body back, ids filled in
    return topic

@router.put("/{topic_id}", response_model=TopicPayload)
async def update_topic(topic_id: str, topic: TopicPayload, storage: TrainingStorage = Depends(get_storage)):
    if not topic.id:
        topic.id = topic_id
    try:
        await storage.update_topic(topic)
    except Exception:
        logger.error("Failed to update topic %s", topic_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update topic")
    return topic

@router.delete("/{topic_id}", response_model=SuccessResponse)
async def delete_topic(topic_id: str, storage: TrainingStorage = Depends(get_storage)):
    try:
        await storage.delete_topic(topic_id)
    except Exception:
        logger.error("Failed to delete topic %s", topic_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete topic")
    return SuccessResponse()

@router.post("/{topic_id}/restore", response_model=SuccessResponse)
async def restore_topic(topic_id: str, storage: TrainingStorage = Depends(get_storage)):
    try:
        await storage.restore_topic(topic_id)
    except Exception:
        logger.error("Failed to restore topic %s", topic_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to restore topic")
    return SuccessResponse()

@router.get("/{topic_id}/export")
async def export_topic(
    topic_id: str,
    format: Literal["pdf", "docx"] = Query("pdf"),
    storage: TrainingStorage = Depends(get_storage),
):
    topic = await storage.get_topic(topic_id)
    if topic is None:
        raise HTTPException(status_code=404, detail="Topic not found")

    builder, media_type = EXPORTERS[format]
    try:
        content = builder(topic)
    except Exception:
        logger.error("Failed to export topic %s as %s", topic_id, format, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export topic")

    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename={export_filename(topic, format)}",
            "Access-Control-Expose-Headers": "Content-Disposition",
        },
    )

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from training_tracker.schemas.progress_schema import DashboardSummary, ProgressRecord, SubtopicStatus, TopicUnderstanding
from training_tracker.services import aggregation
from training_tracker.services.storage import TrainingStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/summary", response_model=DashboardSummary)
async def progress_summary(storage: TrainingStorage = Depends(get_storage)):
    try:
        topics = await storage.get_topics()
        users = await storage.list_users()
        progress = await storage.get_all_progress()
    except Exception:
        logger.error("Failed to fetch progress summary", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch progress summary")
    return aggregation.dashboard_summary(topics, users, progress)

@router.get("/{user_id}", response_model=List[ProgressRecord])
async def get_progress(user_id: str, storage: TrainingStorage = Depends(get_storage)):
    try:
        return await storage.get_progress(user_id)
    except Exception:
        logger.error("Failed to fetch progress for %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch progress")

@router.get("/{user_id}/topics", response_model=List[TopicUnderstanding])
async def get_topic_understanding(user_id: str, storage: TrainingStorage = Depends(get_storage)):
    try:
        topics = await storage.get_topics()
        progress = await storage.get_progress(user_id)
    except Exception:
        logger.error("Failed to fetch topic understanding for %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch progress")
    return aggregation.user_topic_understanding(topics, progress, user_id)

@router.get("/{user_id}/topics/{topic_id}", response_model=List[SubtopicStatus])
async def get_module_detail(user_id: str, topic_id: str, storage: TrainingStorage = Depends(get_storage)):
    topic = await storage.get_topic(topic_id)
    if topic is None:
        raise HTTPException(status_code=404, detail="Topic not found")
    try:
        progress = await storage.get_progress(user_id)
    except Exception:
        logger.error("Failed to fetch module detail for %s", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch progress")
    return aggregation.employee_module_detail(topic, progress, user_id)

@router.post("", response_model=ProgressRecord)
async def save_progress(progress: ProgressRecord, storage: TrainingStorage = Depends(get_storage)):
    if await storage.get_subtopic(progress.subtopic_id) is None:
        raise HTTPException(status_code=404, detail="Subtopic not found")
    try:
        await storage.save_progress(progress)
    except Exception:
        logger.error("Failed to save progress", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save progress")
    return progress

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from training_tracker.database import get_db
from training_tracker.models.progress import Progress
from training_tracker.models.topic import Comment, Subtopic, Topic
from training_tracker.models.user import User
from training_tracker.schemas.progress_schema import ProgressRecord
from training_tracker.schemas.topic_schema import CommentPayload, TopicPayload
from training_tracker.schemas.user_schema import UserCreate
from training_tracker.utils.time_utils import get_local_time, to_local_naive

logger = logging.getLogger(__name__)

def new_id() -> str:
    return str(uuid.uuid4())

class TrainingStorage:
    """Key-based CRUD over users, topics, subtopics, comments and progress.

    Every write commits on its own. ``save_topic`` deletes the previous
    subtopics and inserts the new ones in a single commit, but nothing spans
    more than one call.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _upsert(self, model, keys: list, values: Dict[str, Any]) -> None:
        """INSERT .. ON CONFLICT DO UPDATE as one statement."""
        if self.db.bind.dialect.name == "postgresql":
            stmt = postgresql.insert(model)
        else:
            stmt = sqlite.insert(model)
        stmt = stmt.values(**values)
        key_names = {key.key for key in keys}
        stmt = stmt.on_conflict_do_update(
            index_elements=keys,
            set_={name: stmt.excluded[name] for name in values if name not in key_names},
        )
        await self.db.execute(stmt)

    # --- Topics ---

    def _topic_query(self):
        return (
            select(Topic)
            .options(selectinload(Topic.subtopics).selectinload(Subtopic.comments))
            .execution_options(populate_existing=True)
        )

    async def get_topics(self) -> List[Topic]:
        result = await self.db.execute(self._topic_query().order_by(Topic.id))
        return list(result.scalars().all())

    async def get_topic(self, topic_id: str) -> Optional[Topic]:
        result = await self.db.execute(self._topic_query().where(Topic.id == topic_id))
        return result.scalar_one_or_none()

    async def save_topic(self, topic: TopicPayload) -> str:
        """Upsert a topic and replace its whole subtopic set (comments included)."""
        if not topic.id:
            topic.id = new_id()
        topic_id = topic.id
        for subtopic in topic.subtopics:
            if not subtopic.id:
                subtopic.id = new_id()
            for link in subtopic.resource_links:
                if not link.id:
                    link.id = new_id()
        new_subtopic_ids = [s.id for s in topic.subtopics]

        # Subtopics and comments are rewritten wholesale; no stale identity may be flushed back
        self.db.expunge_all()
        old_subtopic_ids = select(Subtopic.id).where(Subtopic.topic_id == topic_id)
        # Progress survives only for subtopic ids that are kept
        await self.db.execute(
            delete(Progress)
            .where(
                Progress.subtopic_id.in_(old_subtopic_ids),
                Progress.subtopic_id.notin_(new_subtopic_ids),
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Comment)
            .where(Comment.subtopic_id.in_(old_subtopic_ids))
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            delete(Subtopic)
            .where(Subtopic.topic_id == topic_id)
            .execution_options(synchronize_session=False)
        )

        await self._upsert(
            Topic,
            [Topic.id],
            {"id": topic_id, "title": topic.title, "icon": topic.icon, "is_deleted": topic.is_deleted},
        )

        for position, subtopic in enumerate(topic.subtopics):
            self.db.add(Subtopic(
                id=subtopic.id,
                topic_id=topic_id,
                title=subtopic.title,
                resources=subtopic.resources,
                resource_links=[
                    link.model_dump(exclude={"embed_url"}) for link in subtopic.resource_links
                ],
                position=position,
            ))
            for comment in subtopic.comments:
                self.db.add(self._comment_row(subtopic.id, comment))

        await self.db.commit()
        logger.info("Saved topic %s with %d subtopics", topic_id, len(topic.subtopics))
        return topic_id

    async def update_topic(self, topic: TopicPayload) -> str:
        return await self.save_topic(topic)

    async def _set_deleted(self, topic_id: str, deleted: bool) -> None:
        row = await self.db.get(Topic, topic_id)
        if row is None:
            logger.debug("Topic %s not found, nothing to toggle", topic_id)
            return
        row.is_deleted = deleted
        await self.db.commit()

    async def delete_topic(self, topic_id: str) -> None:
        await self._set_deleted(topic_id, True)

    async def restore_topic(self, topic_id: str) -> None:
        await self._set_deleted(topic_id, False)

    # --- Comments ---

    @staticmethod
    def _comment_row(subtopic_id: str, comment: CommentPayload) -> Comment:
        return Comment(
            id=comment.id or new_id(),
            subtopic_id=subtopic_id,
            user_id=comment.user_id,
            text=comment.text or None,
            image_url=comment.image_url or None,
            drawing_url=comment.drawing_url or None,
            timestamp=to_local_naive(comment.timestamp) if comment.timestamp else get_local_time(),
        )

    async def add_comment(self, subtopic_id: str, comment: CommentPayload) -> Comment:
        row = self._comment_row(subtopic_id, comment)
        self.db.add(row)
        await self.db.commit()
        return row

    async def get_subtopic(self, subtopic_id: str) -> Optional[Subtopic]:
        return await self.db.get(Subtopic, subtopic_id)

    # --- Progress ---

    async def get_progress(self, user_id: str) -> List[Progress]:
        result = await self.db.execute(select(Progress).where(Progress.user_id == user_id))
        return list(result.scalars().all())

    async def get_all_progress(self) -> List[Progress]:
        result = await self.db.execute(select(Progress))
        return list(result.scalars().all())

    async def save_progress(self, progress: ProgressRecord) -> Progress:
        await self._upsert(
            Progress,
            [Progress.user_id, Progress.subtopic_id],
            {"user_id": progress.user_id, "subtopic_id": progress.subtopic_id, "status": progress.status.value},
        )
        await self.db.commit()
        return await self.db.get(
            Progress, (progress.user_id, progress.subtopic_id), populate_existing=True
        )

    # --- Users ---

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == username))
        return result.scalar_one_or_none()

    async def list_users(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def count_users(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def create_user(self, user: UserCreate) -> User:
        row = User(
            id=user.id or new_id(),
            name=user.name,
            email=user.email,
            role=user.role.value,
            avatar=user.avatar,
        )
        self.db.add(row)
        await self.db.commit()
        return row

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        row = await self.db.get(User, user_id)
        if row is None:
            return None
        for field, value in changes.items():
            if hasattr(row, field):
                setattr(row, field, value)
        await self.db.commit()
        return row

def get_storage(db: AsyncSession = Depends(get_db)) -> TrainingStorage:
    return TrainingStorage(db)

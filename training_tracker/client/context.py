"""Client-side data context for the training API.

Holds the session's users, topics and progress in memory. Mutations change
local state first and then send the matching request without waiting for
it; a failed request is logged and the local change stays as it is.
"""

import asyncio
import logging
import uuid
from typing import Dict, List, Optional, Set

import httpx

from training_tracker.config import Config
from training_tracker.models.progress import ProgressStatus
from training_tracker.models.user import Role
from training_tracker.schemas.progress_schema import ProgressRecord
from training_tracker.schemas.topic_schema import CommentPayload, TopicPayload
from training_tracker.schemas.user_schema import UserResponse
from training_tracker.services.seed import DEFAULT_USER_IDS
from training_tracker.utils.time_utils import get_local_time

logger = logging.getLogger(__name__)

class LoginError(Exception):
    pass

def _short_id() -> str:
    return uuid.uuid4().hex[:9]

def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)

class TrainingContext:
    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http = http_client or httpx.AsyncClient(base_url=Config.API_BASE_URL)
        self.current_user: Optional[UserResponse] = None
        self.view_as_user: Optional[UserResponse] = None
        self.users: List[UserResponse] = []
        self.topics: List[TopicPayload] = []
        self.progress: List[ProgressRecord] = []
        self._pending: Set[asyncio.Task] = set()

    # --- Session ---

    async def login(self, email: str) -> UserResponse:
        response = await self.http.post("/api/login", json={"email": email})
        if response.status_code != 200:
            raise LoginError(response.json().get("error", "Login failed"))
        await self.set_current_user(UserResponse.model_validate(response.json()))
        return self.current_user

    async def set_current_user(self, user: UserResponse) -> None:
        self.current_user = user
        self.view_as_user = None
        await self.load_initial_data()
        await self.load_progress()

    async def set_view_as_user(self, user: Optional[UserResponse]) -> None:
        self.view_as_user = user
        await self.load_progress()

    @property
    def active_user(self) -> Optional[UserResponse]:
        return self.view_as_user or self.current_user

    @property
    def active_topics(self) -> List[TopicPayload]:
        return [t for t in self.topics if not t.is_deleted]

    # --- Loading ---

    async def load_initial_data(self) -> None:
        if self.current_user is None:
            return
        try:
            response = await self.http.get("/api/topics")
            response.raise_for_status()
            self.topics = [TopicPayload.model_validate(t) for t in response.json()]
        except httpx.HTTPError as exc:
            logger.error("Failed to load initial data: %s", exc)
            return

        if self.current_user.role == Role.ADMIN:
            self.users = await self._fetch_users(self._known_user_ids())
        else:
            # Non-admin users only see themselves
            self.users = [self.current_user]

    def _known_user_ids(self) -> List[str]:
        user_ids: Dict[str, None] = dict.fromkeys(DEFAULT_USER_IDS)
        for topic in self.topics:
            for subtopic in topic.subtopics:
                for comment in subtopic.comments:
                    user_ids.setdefault(comment.user_id)
        return list(user_ids)

    async def _fetch_user(self, user_id: str) -> Optional[UserResponse]:
        try:
            response = await self.http.get(f"/api/users/{user_id}")
        except httpx.HTTPError:
            return None
        if response.status_code != 200:
            return None
        return UserResponse.model_validate(response.json())

    async def _fetch_users(self, user_ids: List[str]) -> List[UserResponse]:
        users = await asyncio.gather(*(self._fetch_user(uid) for uid in user_ids))
        return [u for u in users if u is not None]

    async def load_progress(self) -> None:
        user = self.active_user
        if user is None:
            return
        try:
            response = await self.http.get(f"/api/progress/{user.id}")
        except httpx.HTTPError as exc:
            logger.error("Failed to load progress: %s", exc)
            return
        if response.status_code == 200:
            self.progress = [ProgressRecord.model_validate(p) for p in response.json()]

    # --- Mutations ---

    def update_progress(self, subtopic_id: str, status: ProgressStatus) -> ProgressRecord:
        user = self.active_user
        record = ProgressRecord(user_id=user.id, subtopic_id=subtopic_id, status=status)
        for index, existing in enumerate(self.progress):
            if existing.user_id == user.id and existing.subtopic_id == subtopic_id:
                self.progress[index] = record
                break
        else:
            self.progress.append(record)

        self._fire("POST", "/api/progress", _dump(record), "save progress")
        return record

    def add_comment(
        self,
        subtopic_id: str,
        user_id: str,
        text: Optional[str] = None,
        image_url: Optional[str] = None,
        drawing_url: Optional[str] = None,
    ) -> CommentPayload:
        comment = CommentPayload(
            id=_short_id(),
            user_id=user_id,
            text=text,
            image_url=image_url,
            drawing_url=drawing_url,
            timestamp=get_local_time(),
        )
        for topic in self.topics:
            for subtopic in topic.subtopics:
                if subtopic.id == subtopic_id:
                    subtopic.comments.append(comment)

        self._fire(
            "POST",
            "/api/comments",
            {"subtopicId": subtopic_id, "comment": _dump(comment)},
            "save comment",
        )
        return comment

    def add_topic(self, topic: TopicPayload) -> TopicPayload:
        topic = topic.model_copy(update={"id": _short_id()})
        self.topics.append(topic)
        self._fire("POST", "/api/topics", _dump(topic), "save topic")
        return topic

    def update_topic(self, topic: TopicPayload) -> None:
        self.topics = [topic if t.id == topic.id else t for t in self.topics]
        self._fire("PUT", f"/api/topics/{topic.id}", _dump(topic), "update topic")

    def _set_deleted(self, topic_id: str, deleted: bool) -> None:
        self.topics = [
            t.model_copy(update={"is_deleted": deleted}) if t.id == topic_id else t
            for t in self.topics
        ]

    def archive_topic(self, topic_id: str) -> None:
        self._set_deleted(topic_id, True)
        self._fire("DELETE", f"/api/topics/{topic_id}", None, "archive topic")

    def restore_topic(self, topic_id: str) -> None:
        self._set_deleted(topic_id, False)
        self._fire("POST", f"/api/topics/{topic_id}/restore", None, "restore topic")

    # --- Fire-and-forget requests ---

    def _fire(self, method: str, url: str, body: Optional[dict], action: str) -> asyncio.Task:
        task = asyncio.create_task(self._send(method, url, body, action))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, method: str, url: str, body: Optional[dict], action: str) -> None:
        try:
            response = await self.http.request(method, url, json=body)
        except httpx.HTTPError as exc:
            logger.error("Failed to %s: %s", action, exc)
            return
        if response.is_error:
            logger.error("Failed to %s: HTTP %s", action, response.status_code)

    async def drain(self) -> None:
        """Wait for every request still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def aclose(self) -> None:
        await self.drain()
        await self.http.aclose()

from pydantic import Field, computed_field
from datetime import datetime
from typing import List, Literal, Optional

from training_tracker.schemas.base_schema import CamelModel
from training_tracker.utils.resources import youtube_embed_url

class ResourceLink(CamelModel):
    id: Optional[str] = None
    type: Literal["video", "document"] = "video"
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)

    @computed_field
    @property
    def embed_url(self) -> Optional[str]:
        if self.type != "video":
            return None
        return youtube_embed_url(self.url)

class CommentPayload(CamelModel):
    id: Optional[str] = None
    user_id: str
    text: Optional[str] = None
    image_url: Optional[str] = None
    drawing_url: Optional[str] = None
    timestamp: Optional[datetime] = None

class SubtopicPayload(CamelModel):
    id: Optional[str] = None
    title: str
    resources: str = ""
    resource_links: List[ResourceLink] = Field(default_factory=list)
    comments: List[CommentPayload] = Field(default_factory=list)

class TopicPayload(CamelModel):
    id: Optional[str] = None
    title: str
    icon: str = "BookOpen"
    is_deleted: bool = False
    subtopics: List[SubtopicPayload] = Field(default_factory=list)

class CommentResponse(CamelModel):
    id: str
    user_id: str
    text: Optional[str] = None
    image_url: Optional[str] = None
    drawing_url: Optional[str] = None
    timestamp: datetime

class SubtopicResponse(CamelModel):
    id: str
    title: str
    resources: str
    resource_links: List[ResourceLink]
    comments: List[CommentResponse]

class TopicResponse(CamelModel):
    id: str
    title: str
    icon: str
    is_deleted: bool
    subtopics: List[SubtopicResponse]

class AddCommentRequest(CamelModel):
    subtopic_id: str
    comment: CommentPayload

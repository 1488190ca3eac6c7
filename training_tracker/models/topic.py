from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from training_tracker.database import Base
from training_tracker.utils.time_utils import get_local_time

class Topic(Base):
    __tablename__ = "topics"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    icon = Column(String, nullable=False, default="BookOpen") # Icon name rendered by the UI
    is_deleted = Column(Boolean, nullable=False, default=False) # Soft delete flag

    subtopics = relationship(
        "Subtopic",
        back_populates="topic",
        order_by="Subtopic.position",
        cascade="all, delete-orphan",
    )

class Subtopic(Base):
    __tablename__ = "subtopics"

    id = Column(String, primary_key=True, index=True)
    topic_id = Column(String, ForeignKey("topics.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    resources = Column(Text, nullable=False, default="") # Markdown notes
    resource_links = Column(JSON, nullable=False, default=list) # [{id, type, title, url}]
    position = Column(Integer, nullable=False, default=0)

    topic = relationship("Topic", back_populates="subtopics")
    comments = relationship(
        "Comment",
        back_populates="subtopic",
        order_by="Comment.timestamp.desc()",
        cascade="all, delete-orphan",
    )

class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, index=True)
    subtopic_id = Column(String, ForeignKey("subtopics.id"), index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)

    text = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    drawing_url = Column(Text, nullable=True)

    timestamp = Column(DateTime, nullable=False, default=get_local_time)

    subtopic = relationship("Subtopic", back_populates="comments")
    author = relationship("User", back_populates="comments")

from sqlalchemy import Column, String
import enum
from training_tracker.database import Base

class ProgressStatus(str, enum.Enum):
    NOT_ADDRESSED = "not_addressed"
    BASIC = "basic"
    GOOD = "good"
    FULLY_UNDERSTOOD = "fully_understood"

class Progress(Base):
    __tablename__ = "progress"

    # One record per (user, subtopic). subtopic_id carries no foreign key:
    # saving a topic deletes and re-inserts its subtopics under the same ids.
    user_id = Column(String, primary_key=True, index=True)
    subtopic_id = Column(String, primary_key=True, index=True)
    status = Column(String, nullable=False, default=ProgressStatus.NOT_ADDRESSED.value)

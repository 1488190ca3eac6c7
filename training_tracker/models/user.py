from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
import enum
from training_tracker.database import Base

class Role(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False) # Login username
    role = Column(String, nullable=False, default=Role.EMPLOYEE.value) # Use String for compatibility
    avatar = Column(String, nullable=False, default="")

    comments = relationship("Comment", back_populates="author")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

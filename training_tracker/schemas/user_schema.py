from pydantic import EmailStr, Field
from typing import Optional

from training_tracker.models.user import Role
from training_tracker.schemas.base_schema import CamelModel

class UserCreate(CamelModel):
    id: Optional[str] = None # Generated when missing
    name: str
    email: EmailStr
    role: Role = Role.EMPLOYEE
    avatar: str = ""

class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None

class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    avatar: str

class LoginRequest(CamelModel):
    email: EmailStr

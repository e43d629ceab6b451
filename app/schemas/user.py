from pydantic import BaseModel, field_validator, ConfigDict, model_validator
from typing import Optional, Any
from datetime import datetime

from app.core.constants import RoleEnum

class UserBase(BaseModel):
    """Base user schema with common fields."""
    full_name: str
    email: str

class UserCreate(UserBase):
    role: RoleEnum = RoleEnum.STUDENT
    enrollment_number: Optional[str] = None
    is_active: bool = True

    @field_validator("email")
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Invalid email address.")
        return v.lower()

class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    enrollment_number: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not any(data.values()):
            raise ValueError("At least one field must be provided for update")
        return data

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role: RoleEnum
    enrollment_number: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class UserContext(BaseModel):
    """The authenticated caller: who they are and the role their token grants."""
    user: User
    role: RoleEnum
    model_config = ConfigDict(from_attributes=True)

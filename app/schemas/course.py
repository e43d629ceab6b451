from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.core.constants import EnrollmentStatusEnum

class CourseCreate(BaseModel):
    code: str
    title: str
    description: Optional[str] = None

class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

class Course(BaseModel):
    id: int
    code: str
    title: str
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

class EnrollmentCreate(BaseModel):
    user_id: int
    course_id: int
    status: EnrollmentStatusEnum = EnrollmentStatusEnum.PENDING

class EnrollmentUpdate(BaseModel):
    status: EnrollmentStatusEnum

class Enrollment(BaseModel):
    id: int
    user_id: int
    course_id: int
    status: EnrollmentStatusEnum
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

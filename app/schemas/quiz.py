from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Any
from datetime import datetime

from app.schemas.question import Question, StudentQuestion

class QuizBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    time_limit: int = Field(..., gt=0, description="Time limit in minutes")
    max_marks: Optional[float] = Field(default=None, ge=0)
    scheduled_for: Optional[datetime] = None

class QuizCreate(QuizBase):
    course_ids: List[int] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Unit 2 quiz",
                "description": "Gradient descent and loss functions",
                "time_limit": 30,
                "max_marks": 20,
                "scheduled_for": None,
                "course_ids": [1]
            }
        }

class QuizUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    max_marks: Optional[float] = Field(default=None, ge=0)
    scheduled_for: Optional[datetime] = None
    course_ids: Optional[List[int]] = Field(default=None, min_length=1)

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not data:
            raise ValueError("At least one field must be provided for update")
        return data

class QuizSummary(QuizBase):
    id: str
    is_active: bool
    course_ids: List[int] = []
    total_questions: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class Quiz(QuizSummary):
    """Owner view, includes the answer key."""
    created_by_id: Optional[int] = None
    teacher_ids: List[int] = []
    updated_at: Optional[datetime] = None
    questions: List[Question] = []

class StudentQuizPaper(QuizSummary):
    questions: List[StudentQuestion] = []

from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime

from app.core.constants import QuizAttemptStatusEnum

class GradingResult(BaseModel):
    is_correct: bool
    score: float
    keyword_match_percentage: Optional[float] = None

class AnswerSubmit(BaseModel):
    question_id: str
    selected_options: List[int] = []
    text_answer: Optional[str] = ""

class SubmitAttemptRequest(BaseModel):
    answers: List[AnswerSubmit] = []

    class Config:
        json_schema_extra = {
            "example": {
                "answers": [
                    {"question_id": "3f1c...", "selected_options": [12]},
                    {"question_id": "9a7b...", "text_answer": "3.05"}
                ]
            }
        }

class Answer(BaseModel):
    id: int
    question_id: str
    selected_options: List[int] = []
    text_answer: Optional[str] = ""
    is_correct: bool
    score: float
    keyword_match_percentage: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

class QuizAttemptCreate(BaseModel):
    quiz_id: str
    user_id: int

class QuizAttemptUpdate(BaseModel):
    status: Optional[QuizAttemptStatusEnum] = None
    score: Optional[float] = None
    submitted_at: Optional[datetime] = None

class QuizAttempt(BaseModel):
    id: str
    quiz_id: str
    user_id: int
    status: QuizAttemptStatusEnum
    score: Optional[float] = None
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class QuizAttemptDetails(QuizAttempt):
    quiz_title: Optional[str] = None
    max_marks: Optional[float] = None
    answers: List[Answer] = []

class QuizStats(BaseModel):
    upcoming: int = 0
    completed: int = 0
    missed: int = 0

class QuizHistoryItem(BaseModel):
    quiz_id: str
    title: str
    status: str  # "SUBMITTED" or "MISSED"
    attempt_id: Optional[str] = None
    score: Optional[float] = None
    max_marks: Optional[float] = None
    scheduled_for: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

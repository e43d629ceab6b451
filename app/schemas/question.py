from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import QuestionTypeEnum, MCQ_QUESTION_TYPES

class OptionCreate(BaseModel):
    text: str
    is_correct: bool = False

class Option(OptionCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)

class StudentOption(BaseModel):
    """Option as shown on the question paper, without the correctness flag."""
    id: int
    text: str
    model_config = ConfigDict(from_attributes=True)

class QuestionBase(BaseModel):
    question_type: QuestionTypeEnum
    text: str = Field(..., min_length=1)
    marks: float = Field(..., gt=0)
    order: int = 0
    image_url: Optional[str] = None

class QuestionCreate(QuestionBase):
    options: List[OptionCreate] = []
    correct_answer: Optional[float] = None
    tolerance: Optional[float] = Field(default=None, ge=0)
    keywords: Optional[List[str]] = None
    threshold: Optional[float] = Field(default=None, ge=0, le=100)

    @field_validator("keywords")
    @classmethod
    def strip_keywords(cls, v):
        if v is None:
            return v
        return [k.strip() for k in v if k and k.strip()]

    @model_validator(mode="after")
    def check_type_rules(self):
        qtype = self.question_type
        if qtype in MCQ_QUESTION_TYPES:
            if len(self.options) < 2:
                raise ValueError("MCQ questions need at least two options.")
            correct = sum(1 for o in self.options if o.is_correct)
            if qtype == QuestionTypeEnum.SINGLE_MCQ and correct != 1:
                raise ValueError("SINGLE_MCQ questions need exactly one correct option.")
            if qtype == QuestionTypeEnum.MULTI_MCQ and correct < 1:
                raise ValueError("MULTI_MCQ questions need at least one correct option.")
        elif qtype == QuestionTypeEnum.NUMERICAL:
            if self.correct_answer is None:
                raise ValueError("NUMERICAL questions need a correct_answer.")
            if self.tolerance is None:
                self.tolerance = 0.0
        elif qtype == QuestionTypeEnum.DESCRIPTIVE:
            if not self.keywords:
                raise ValueError("DESCRIPTIVE questions need at least one keyword.")
            if self.threshold is None:
                self.threshold = 0.0

        if qtype not in MCQ_QUESTION_TYPES and self.options:
            raise ValueError(f"{qtype.value} questions cannot have options.")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "question_type": "NUMERICAL",
                "text": "What is 7 * 1.5?",
                "marks": 5,
                "order": 1,
                "correct_answer": 10.5,
                "tolerance": 0.1,
            }
        }
    )

class QuestionUpdate(QuestionCreate):
    """Full replacement of a question; options are replaced wholesale."""
    pass

class Question(QuestionBase):
    id: str
    quiz_id: str
    correct_answer: Optional[float] = None
    tolerance: Optional[float] = None
    keywords: Optional[List[str]] = None
    threshold: Optional[float] = None
    options: List[Option] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class StudentQuestion(QuestionBase):
    id: str
    options: List[StudentOption] = []

    model_config = ConfigDict(from_attributes=True)

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Any
from datetime import datetime

from app.core.constants import COEnum

class SubjectCreate(BaseModel):
    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

class Subject(SubjectCreate):
    teacher_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)

class MSTMapping(BaseModel):
    q1: COEnum
    q2: COEnum
    q3: COEnum

class COMappingCreate(BaseModel):
    subject_code: str
    mst1: MSTMapping
    mst2: MSTMapping
    quiz_assignment: List[COEnum] = []

    class Config:
        json_schema_extra = {
            "example": {
                "subject_code": "CS301",
                "mst1": {"q1": "CO1", "q2": "CO2", "q3": "CO1"},
                "mst2": {"q1": "CO3", "q2": "CO4", "q3": "CO5"},
                "quiz_assignment": ["CO1", "CO2"]
            }
        }

class COMapping(COMappingCreate):
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def from_flat_columns(cls, data: Any):
        if isinstance(data, dict) or not hasattr(data, "mst1_q1"):
            return data
        return {
            "subject_code": data.subject_code,
            "mst1": {"q1": data.mst1_q1, "q2": data.mst1_q2, "q3": data.mst1_q3},
            "mst2": {"q1": data.mst2_q1, "q2": data.mst2_q2, "q3": data.mst2_q3},
            "quiz_assignment": data.quiz_assignment or [],
            "updated_at": data.updated_at,
        }

class ScoreSheetMarks(BaseModel):
    mst1_q1: Optional[float] = Field(default=None, ge=0)
    mst1_q2: Optional[float] = Field(default=None, ge=0)
    mst1_q3: Optional[float] = Field(default=None, ge=0)
    mst2_q1: Optional[float] = Field(default=None, ge=0)
    mst2_q2: Optional[float] = Field(default=None, ge=0)
    mst2_q3: Optional[float] = Field(default=None, ge=0)
    quiz_assignment: Optional[float] = Field(default=None, ge=0)
    end_sem_q1: Optional[float] = Field(default=None, ge=0)
    end_sem_q2: Optional[float] = Field(default=None, ge=0)
    end_sem_q3: Optional[float] = Field(default=None, ge=0)
    end_sem_q4: Optional[float] = Field(default=None, ge=0)
    end_sem_q5: Optional[float] = Field(default=None, ge=0)

class ScoreSheetCreate(ScoreSheetMarks):
    enrollment_number: str = Field(..., min_length=1)
    subject_code: str
    name: str

class ScoreSheetUpdate(ScoreSheetMarks):
    name: Optional[str] = None

class ScoreSheet(ScoreSheetCreate):
    model_config = ConfigDict(from_attributes=True)

from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import date

from app.core.constants import AssessmentComponentEnum, COEnum, AttendanceMarkEnum

class COAttainmentRow(BaseModel):
    co: COEnum
    total: float
    average: float  # target mark
    students_above_target: int
    percentage: float
    attainment_level: int

class ComponentAttainmentReport(BaseModel):
    subject_code: str
    component: AssessmentComponentEnum
    student_count: int
    rows: List[COAttainmentRow]

class FinalScoreRow(BaseModel):
    co: COEnum
    mst1: float
    mst2: float
    quiz: float
    cie: float
    see: float
    final: float

class COAttainmentReport(BaseModel):
    subject_code: str
    student_count: int
    attainment: List[COAttainmentRow]
    final_scores: List[FinalScoreRow]

class MarksSummaryRow(BaseModel):
    enrollment_number: str
    name: str
    mst1_total: float
    mst2_total: float
    mst_best: float
    end_sem_total: float

class MarksSummary(BaseModel):
    rows: List[MarksSummaryRow]
    averages: Dict[str, float]

class AttendanceRow(BaseModel):
    student_id: int
    enrollment_number: Optional[str] = None
    name: str
    days: Dict[int, AttendanceMarkEnum]
    present_days: int
    percentage: float

class AttendanceReport(BaseModel):
    course_id: int
    month: int
    year: int
    days_in_month: int
    rows: List[AttendanceRow]

class AttendanceSessionCreate(BaseModel):
    course_id: int
    held_on: date
    duration: Optional[int] = None
    is_active: bool = False

class AttendanceResponseCreate(BaseModel):
    session_id: int
    student_id: int
    enrollment_number: Optional[str] = None

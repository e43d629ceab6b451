"""Course-outcome attainment over persisted score-sheet rows.

The module-level functions are pure transforms over ``ScoreSheet`` rows and a
``COMapping``; ``AttainmentService`` only loads the rows for a subject and
hands them over. For every CO bucket the class average is used as the target
mark, and the attainment level is derived from the share of students whose own
total reaches that target.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence
from sqlalchemy.orm import Session

from app.core.constants import (
    AssessmentComponentEnum, COEnum, CO_BUCKETS, MST1_SLOTS, MST2_SLOTS, END_SEM_SLOTS,
    CIE_WEIGHT, SEE_WEIGHT, ATTAINMENT_THRESHOLDS,
)
from app.core.exceptions import NotFoundError
from app.crud.subject import subject as crud_subject, co_mapping as crud_co_mapping, score_sheet as crud_score_sheet
from app.models.subject import COMapping, ScoreSheet
from app.schemas.report import (
    COAttainmentRow, ComponentAttainmentReport, FinalScoreRow, COAttainmentReport, MarksSummaryRow, MarksSummary
)
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)

CIE_COMPONENTS = (AssessmentComponentEnum.MST1, AssessmentComponentEnum.MST2, AssessmentComponentEnum.QUIZ)


def _mark(sheet: ScoreSheet, slot: str) -> float:
    return float(getattr(sheet, slot) or 0.0)


def _co_name(value) -> str:
    return value.value if isinstance(value, COEnum) else str(value)


def _empty_buckets() -> Dict[str, float]:
    return {co: 0.0 for co in CO_BUCKETS}


def attainment_level(percentage: float) -> int:
    # Classified on the two-decimal figure shown in reports, so 69.996 is 70.00.
    percentage = round(percentage, 2)
    for minimum, level in ATTAINMENT_THRESHOLDS:
        if percentage >= minimum:
            return level
    return 0


def component_totals(sheet: ScoreSheet, mapping: Optional[COMapping], component: AssessmentComponentEnum) -> Dict[str, float]:
    """Per-CO marks of one student for one assessment component."""
    totals = _empty_buckets()

    if component == AssessmentComponentEnum.CIE:
        for part in CIE_COMPONENTS:
            for co, value in component_totals(sheet, mapping, part).items():
                totals[co] += value
        return totals

    if component == AssessmentComponentEnum.END_SEM:
        for co, slot in zip(CO_BUCKETS, END_SEM_SLOTS):
            totals[co] += _mark(sheet, slot)
        return totals

    if mapping is None:
        raise NotFoundError("CO mapping", sheet.subject_code)

    if component in (AssessmentComponentEnum.MST1, AssessmentComponentEnum.MST2):
        slots = MST1_SLOTS if component == AssessmentComponentEnum.MST1 else MST2_SLOTS
        for slot in slots:
            totals[_co_name(getattr(mapping, slot))] += _mark(sheet, slot)
        return totals

    # QUIZ: the composite mark is split evenly across every listed CO.
    quiz_cos = [_co_name(co) for co in (mapping.quiz_assignment or [])]
    if not quiz_cos:
        logger.warning("Subject %s maps the quiz composite to no CO; it contributes nothing.", mapping.subject_code)
        return totals
    share = _mark(sheet, "quiz_assignment") / len(quiz_cos)
    for co in quiz_cos:
        totals[co] += share
    return totals


def compute_attainment(sheets: Sequence[ScoreSheet], mapping: Optional[COMapping], component: AssessmentComponentEnum) -> List[COAttainmentRow]:
    student_count = len(sheets)
    per_student = [component_totals(sheet, mapping, component) for sheet in sheets]

    rows = []
    for co in CO_BUCKETS:
        total = sum(s[co] for s in per_student)
        if student_count == 0:
            average = 0.0
            above = 0
            percentage = 0.0
        else:
            average = total / student_count
            # own * n against total, so a student sitting exactly on the average is never lost to rounding
            above = sum(
                1 for s in per_student
                if s[co] * student_count >= total or math.isclose(s[co] * student_count, total)
            )
            percentage = above / student_count * 100
        rows.append(COAttainmentRow(
            co=co,
            total=total,
            average=average,
            students_above_target=above,
            percentage=percentage,
            attainment_level=attainment_level(percentage) if student_count else 0,
        ))
    return rows


def compute_final_scores(sheets: Sequence[ScoreSheet], mapping: COMapping) -> List[FinalScoreRow]:
    """CIE/SEE blended direct attainment per CO."""
    student_count = len(sheets)
    sums = {}
    for component in (*CIE_COMPONENTS, AssessmentComponentEnum.END_SEM):
        bucket = _empty_buckets()
        for sheet in sheets:
            for co, value in component_totals(sheet, mapping, component).items():
                bucket[co] += value
        sums[component] = bucket

    rows = []
    for co in CO_BUCKETS:
        if student_count == 0:
            rows.append(FinalScoreRow(co=co, mst1=0.0, mst2=0.0, quiz=0.0, cie=0.0, see=0.0, final=0.0))
            continue
        mst1 = sums[AssessmentComponentEnum.MST1][co]
        mst2 = sums[AssessmentComponentEnum.MST2][co]
        quiz = sums[AssessmentComponentEnum.QUIZ][co]
        end_sem = sums[AssessmentComponentEnum.END_SEM][co]
        cie = (mst1 + mst2 + quiz) / student_count * CIE_WEIGHT
        see = end_sem / student_count * SEE_WEIGHT
        rows.append(FinalScoreRow(
            co=co,
            mst1=mst1 / student_count,
            mst2=mst2 / student_count,
            quiz=quiz / student_count,
            cie=cie,
            see=see,
            final=cie + see,
        ))
    return rows


def summarize_marks(sheets: Sequence[ScoreSheet]) -> MarksSummary:
    rows = []
    for sheet in sheets:
        mst1 = sum(_mark(sheet, slot) for slot in MST1_SLOTS)
        mst2 = sum(_mark(sheet, slot) for slot in MST2_SLOTS)
        rows.append(MarksSummaryRow(
            enrollment_number=sheet.enrollment_number,
            name=sheet.name,
            mst1_total=mst1,
            mst2_total=mst2,
            mst_best=max(mst1, mst2),
            end_sem_total=sum(_mark(sheet, slot) for slot in END_SEM_SLOTS),
        ))

    columns = ("mst1_total", "mst2_total", "mst_best", "end_sem_total")
    count = len(rows)
    averages = {
        column: (sum(getattr(r, column) for r in rows) / count if count else 0.0)
        for column in columns
    }
    return MarksSummary(rows=rows, averages=averages)


class AttainmentService:

    def _load(self, db: Session, subject_code: str, require_mapping: bool = True):
        subject = crud_subject.get(db, code=subject_code)
        if not subject:
            raise NotFoundError("Subject", subject_code)
        mapping = crud_co_mapping.get_by_subject(db, subject_code=subject_code)
        if require_mapping and mapping is None:
            raise NotFoundError("CO mapping", subject_code)
        sheets = crud_score_sheet.get_by_subject(db, subject_code=subject_code)
        if not sheets:
            logger.warning("Subject %s has no score-sheet rows; attainment is zero.", subject_code)
        return mapping, sheets

    def load_component_inputs(self, db: Session, subject_code: str, component: AssessmentComponentEnum, current_user_context: UserContext):
        permission_helper.require_teacher_or_admin(current_user_context)
        return self._load(db, subject_code, require_mapping=component != AssessmentComponentEnum.END_SEM)

    def compute_co_attainment(self, db: Session, subject_code: str, current_user_context: UserContext) -> COAttainmentReport:
        permission_helper.require_teacher_or_admin(current_user_context)
        mapping, sheets = self._load(db, subject_code)
        return COAttainmentReport(
            subject_code=subject_code,
            student_count=len(sheets),
            attainment=compute_attainment(sheets, mapping, AssessmentComponentEnum.CIE),
            final_scores=compute_final_scores(sheets, mapping),
        )

    def compute_quiz_attainment(self, db: Session, subject_code: str, current_user_context: UserContext) -> ComponentAttainmentReport:
        return self.compute_component_attainment(db, subject_code, AssessmentComponentEnum.QUIZ, current_user_context)

    def compute_component_attainment(self, db: Session, subject_code: str, component: AssessmentComponentEnum, current_user_context: UserContext) -> ComponentAttainmentReport:
        mapping, sheets = self.load_component_inputs(db, subject_code, component, current_user_context)
        return ComponentAttainmentReport(
            subject_code=subject_code,
            component=component,
            student_count=len(sheets),
            rows=compute_attainment(sheets, mapping, component),
        )

    def get_marks_summary(self, db: Session, subject_code: str, current_user_context: UserContext) -> MarksSummary:
        permission_helper.require_teacher_or_admin(current_user_context)
        _, sheets = self._load(db, subject_code, require_mapping=False)
        return summarize_marks(sheets)


attainment_service = AttainmentService()

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.constants import AssessmentComponentEnum, XLSX_MEDIA_TYPE
from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.user import UserContext
from app.schemas.report import COAttainmentReport, ComponentAttainmentReport, AttendanceReport
from app.services.attainment import attainment_service
from app.services.report import report_service

router = APIRouter()

def _xlsx(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/co-attainment/{subject_code}", response_model=APIResponse[COAttainmentReport])
def get_co_attainment(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    report = attainment_service.compute_co_attainment(db, subject_code=subject_code, current_user_context=context)
    return APIResponse(message="CO attainment computed successfully", data=report)


@router.get("/co-attainment/{subject_code}/download")
def download_co_attainment(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = report_service.download_co_attainment(db, subject_code=subject_code, current_user_context=context)
    return _xlsx(content, f"{subject_code}_co_attainment.xlsx")


@router.get("/quiz-attainment/{subject_code}", response_model=APIResponse[ComponentAttainmentReport])
def get_quiz_attainment(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    report = attainment_service.compute_quiz_attainment(db, subject_code=subject_code, current_user_context=context)
    return APIResponse(message="Quiz attainment computed successfully", data=report)


@router.get("/attainment/{subject_code}/{component}", response_model=APIResponse[ComponentAttainmentReport])
def get_component_attainment(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    component: AssessmentComponentEnum,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    report = attainment_service.compute_component_attainment(
        db, subject_code=subject_code, component=component, current_user_context=context
    )
    return APIResponse(message=f"{component.value} attainment computed successfully", data=report)


@router.get("/attainment/{subject_code}/{component}/download")
def download_component_attainment(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    component: AssessmentComponentEnum,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = report_service.download_component_attainment(
        db, subject_code=subject_code, component=component, current_user_context=context
    )
    return _xlsx(content, f"{subject_code}_{component.value.lower()}_attainment.xlsx")


@router.get("/sheets/{subject_code}/download")
def download_marks(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = report_service.download_marks(db, subject_code=subject_code, current_user_context=context)
    return _xlsx(content, f"{subject_code}_marks.xlsx")


@router.get("/attendance/{course_id}", response_model=APIResponse[AttendanceReport])
def get_attendance_report(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    report = report_service.build_attendance_report(
        db, course_id=course_id, month=month, year=year, current_user_context=context
    )
    return APIResponse(message="Attendance report generated successfully", data=report)


@router.get("/attendance/{course_id}/download")
def download_attendance_report(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    content = report_service.download_attendance_report(
        db, course_id=course_id, month=month, year=year, current_user_context=context
    )
    return _xlsx(content, f"attendance_{course_id}_{year}_{month:02d}.xlsx")

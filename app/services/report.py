import calendar
import io
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd
from sqlalchemy.orm import Session

from app.core.constants import (
    AssessmentComponentEnum, AttendanceMarkEnum, CO_BUCKETS, MST1_SLOTS, MST2_SLOTS, END_SEM_SLOTS,
)
from app.core.exceptions import NotFoundError
from app.crud.attendance import attendance_session as crud_attendance_session
from app.crud.course import course as crud_course
from app.crud.course_enrollment import enrollment as crud_enrollment
from app.models.subject import COMapping, ScoreSheet
from app.schemas.report import (
    AttendanceReport, AttendanceRow, COAttainmentReport, COAttainmentRow, MarksSummary
)
from app.schemas.user import UserContext
from app.services.attainment import attainment_service, component_totals, compute_attainment
from app.utils.permission import PermissionHelper as permission_helper

COMPONENT_SLOTS = {
    AssessmentComponentEnum.MST1: MST1_SLOTS,
    AssessmentComponentEnum.MST2: MST2_SLOTS,
    AssessmentComponentEnum.QUIZ: ("quiz_assignment",),
    AssessmentComponentEnum.END_SEM: END_SEM_SLOTS,
    AssessmentComponentEnum.CIE: MST1_SLOTS + MST2_SLOTS + ("quiz_assignment",),
}


def _slot_label(slot: str) -> str:
    return slot.upper().replace("END_SEM", "EndSem").replace("QUIZ_ASSIGNMENT", "Quiz_Assignment")


def workbook_bytes(frames: Dict[str, pd.DataFrame]) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return buffer.getvalue()


def render_component_attainment_workbook(
    sheets: Sequence[ScoreSheet],
    mapping: Optional[COMapping],
    component: AssessmentComponentEnum,
    rows: Optional[List[COAttainmentRow]] = None,
) -> bytes:
    rows = rows if rows is not None else compute_attainment(sheets, mapping, component)
    slots = COMPONENT_SLOTS[component]
    total_columns = [f"Total {co}" for co in CO_BUCKETS]

    records = []
    for sheet in sheets:
        record = {"Enrollment No.": sheet.enrollment_number, "Name": sheet.name}
        for slot in slots:
            record[_slot_label(slot)] = getattr(sheet, slot) or 0
        totals = component_totals(sheet, mapping, component)
        for co, column in zip(CO_BUCKETS, total_columns):
            record[column] = totals[co]
        records.append(record)

    columns = ["Enrollment No.", "Name", *[_slot_label(s) for s in slots], *total_columns]
    frame = pd.DataFrame(records, columns=columns)

    summary_labels = (
        ("Average (Target Marks)", "average"),
        ("Students >= Target Marks", "students_above_target"),
        ("Percentage", "percentage"),
        ("CO Level", "attainment_level"),
    )
    summary = []
    for label, field in summary_labels:
        line = {"Name": label}
        for row, column in zip(rows, total_columns):
            value = getattr(row, field)
            line[column] = round(value, 2) if isinstance(value, float) else value
        summary.append(line)
    frame = pd.concat([frame, pd.DataFrame(summary, columns=columns)], ignore_index=True)

    return workbook_bytes({f"{component.value} Attainment": frame})


def render_final_attainment_workbook(report: COAttainmentReport) -> bytes:
    frame = pd.DataFrame(
        [
            {
                "CO": row.co.value,
                "MST-1": round(row.mst1, 2),
                "MST-2": round(row.mst2, 2),
                "Assignment/Quiz": round(row.quiz, 2),
                "CIE (30%)": round(row.cie, 2),
                "SEE (70%)": round(row.see, 2),
                "CO Direct Attainment": round(row.final, 2),
            }
            for row in report.final_scores
        ]
    )
    levels = pd.DataFrame(
        [
            {
                "CO": row.co.value,
                "Target Marks": round(row.average, 2),
                "Students >= Target": row.students_above_target,
                "Percentage": round(row.percentage, 2),
                "CO Level": row.attainment_level,
            }
            for row in report.attainment
        ]
    )
    return workbook_bytes({"Final CO Attainment": frame, "CIE Levels": levels})


def render_marks_workbook(summary: MarksSummary) -> bytes:
    columns = ["Enrollment No.", "Name", "MST1_Total", "MST2_Total", "MST_Best", "EndSem_Total"]
    records = [
        [r.enrollment_number, r.name, r.mst1_total, r.mst2_total, r.mst_best, r.end_sem_total]
        for r in summary.rows
    ]
    averages = summary.averages
    records.append([
        "", "Average",
        round(averages["mst1_total"], 2),
        round(averages["mst2_total"], 2),
        round(averages["mst_best"], 2),
        round(averages["end_sem_total"], 2),
    ])
    return workbook_bytes({"Marks": pd.DataFrame(records, columns=columns)})


def render_attendance_workbook(report: AttendanceReport) -> bytes:
    day_columns = [str(day) for day in range(1, report.days_in_month + 1)]
    records = []
    for row in report.rows:
        record = {"Enrollment No.": row.enrollment_number or "", "Name": row.name}
        for day in range(1, report.days_in_month + 1):
            record[str(day)] = row.days[day].value
        record["Present Days"] = row.present_days
        record["Percentage"] = f"{row.percentage:.2f}"
        records.append(record)
    frame = pd.DataFrame(records, columns=["Enrollment No.", "Name", *day_columns, "Present Days", "Percentage"])
    return workbook_bytes({f"{report.year}-{report.month:02d}": frame})


class ReportService:

    def download_component_attainment(self, db: Session, subject_code: str, component: AssessmentComponentEnum, current_user_context: UserContext) -> bytes:
        mapping, sheets = attainment_service.load_component_inputs(db, subject_code, component, current_user_context)
        return render_component_attainment_workbook(sheets, mapping, component)

    def download_co_attainment(self, db: Session, subject_code: str, current_user_context: UserContext) -> bytes:
        report = attainment_service.compute_co_attainment(db, subject_code, current_user_context)
        return render_final_attainment_workbook(report)

    def download_marks(self, db: Session, subject_code: str, current_user_context: UserContext) -> bytes:
        summary = attainment_service.get_marks_summary(db, subject_code, current_user_context)
        return render_marks_workbook(summary)

    def build_attendance_report(self, db: Session, course_id: int, month: int, year: int, current_user_context: UserContext) -> AttendanceReport:
        permission_helper.require_teacher_or_admin(current_user_context)
        if not crud_course.get(db, id=course_id):
            raise NotFoundError("Course", course_id)

        days_in_month = calendar.monthrange(year, month)[1]
        sessions = crud_attendance_session.get_by_course_between(
            db,
            course_id=course_id,
            start=date(year, month, 1),
            end=date(year, month, days_in_month),
        )
        present_days: Dict[int, set] = {}
        for session in sessions:
            for response in session.responses:
                present_days.setdefault(response.student_id, set()).add(session.held_on.day)

        rows = []
        for enrollment in crud_enrollment.get_accepted_by_course(db, course_id=course_id):
            student = enrollment.user
            attended = present_days.get(student.id, set())
            rows.append(AttendanceRow(
                student_id=student.id,
                enrollment_number=student.enrollment_number,
                name=student.full_name or "",
                days={
                    day: AttendanceMarkEnum.PRESENT if day in attended else AttendanceMarkEnum.ABSENT
                    for day in range(1, days_in_month + 1)
                },
                present_days=len(attended),
                percentage=round(len(attended) / days_in_month * 100, 2),
            ))
        rows.sort(key=lambda r: (r.enrollment_number or "", r.name))

        return AttendanceReport(
            course_id=course_id,
            month=month,
            year=year,
            days_in_month=days_in_month,
            rows=rows,
        )

    def download_attendance_report(self, db: Session, course_id: int, month: int, year: int, current_user_context: UserContext) -> bytes:
        return render_attendance_workbook(self.build_attendance_report(db, course_id, month, year, current_user_context))


report_service = ReportService()

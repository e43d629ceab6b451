from datetime import date
from typing import List
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.attendance import AttendanceSession, AttendanceResponse
from app.schemas.report import AttendanceSessionCreate, AttendanceResponseCreate


class CRUDAttendanceSession(CRUDBase[AttendanceSession, AttendanceSessionCreate, AttendanceSessionCreate]):

    def get_by_course_between(self, db: Session, *, course_id: int, start: date, end: date) -> List[AttendanceSession]:
        return (
            db.query(AttendanceSession)
            .options(selectinload(AttendanceSession.responses))
            .filter(
                AttendanceSession.course_id == course_id,
                AttendanceSession.held_on >= start,
                AttendanceSession.held_on <= end,
            )
            .order_by(AttendanceSession.held_on)
            .all()
        )


class CRUDAttendanceResponse(CRUDBase[AttendanceResponse, AttendanceResponseCreate, AttendanceResponseCreate]):
    pass


attendance_session = CRUDAttendanceSession(AttendanceSession)
attendance_response = CRUDAttendanceResponse(AttendanceResponse)

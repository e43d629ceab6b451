from typing import List
from sqlalchemy.orm import Session, selectinload
from app.crud.base import CRUDBase
from app.core.constants import EnrollmentStatusEnum
from app.models.course_enrollment import Enrollment
from app.schemas.course import EnrollmentCreate, EnrollmentUpdate

class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate, EnrollmentUpdate]):
    def get_accepted_course_ids(self, db: Session, *, user_id: int) -> List[int]:
        rows = (
            db.query(Enrollment.course_id)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.status == EnrollmentStatusEnum.ACCEPTED,
            )
            .all()
        )
        return [row[0] for row in rows]

    def get_accepted_by_course(self, db: Session, *, course_id: int) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .options(selectinload(Enrollment.user))
            .filter(
                Enrollment.course_id == course_id,
                Enrollment.status == EnrollmentStatusEnum.ACCEPTED,
            )
            .all()
        )

    def has_accepted_enrollment(self, db: Session, *, user_id: int, course_ids: List[int]) -> bool:
        if not course_ids:
            return False
        return (
            db.query(Enrollment.id)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.course_id.in_(course_ids),
                Enrollment.status == EnrollmentStatusEnum.ACCEPTED,
            )
            .first()
            is not None
        )

enrollment = CRUDEnrollment(Enrollment)

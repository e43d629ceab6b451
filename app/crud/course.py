from typing import List
from sqlalchemy.orm import Session, selectinload
from app.crud.base import CRUDBase
from app.models.course import Course
from app.schemas.course import CourseCreate, CourseUpdate

class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):
    def get_by_ids(self, db: Session, ids: List[int]) -> List[Course]:
        if not ids:
            return []
        return db.query(Course).filter(Course.id.in_(ids)).all()

    def get_with_teachers(self, db: Session, id: int):
        return db.query(Course).options(selectinload(Course.teachers)).filter(Course.id == id).first()

course = CRUDCourse(Course)

from typing import List, Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.subject import Subject, COMapping, ScoreSheet
from app.schemas.co import SubjectCreate, COMappingCreate, ScoreSheetCreate, ScoreSheetUpdate


class CRUDSubject(CRUDBase[Subject, SubjectCreate, SubjectCreate]):

    def get(self, db: Session, code: str) -> Optional[Subject]:
        return db.query(Subject).filter(Subject.code == code).first()

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Subject]:
        return db.query(Subject).order_by(Subject.code).offset(skip).limit(limit).all()


class CRUDCOMapping(CRUDBase[COMapping, COMappingCreate, COMappingCreate]):

    def get_by_subject(self, db: Session, subject_code: str) -> Optional[COMapping]:
        return db.query(COMapping).filter(COMapping.subject_code == subject_code).first()

    def upsert(self, db: Session, *, obj_in: COMappingCreate, commit: bool = True) -> COMapping:
        values = {
            "mst1_q1": obj_in.mst1.q1,
            "mst1_q2": obj_in.mst1.q2,
            "mst1_q3": obj_in.mst1.q3,
            "mst2_q1": obj_in.mst2.q1,
            "mst2_q2": obj_in.mst2.q2,
            "mst2_q3": obj_in.mst2.q3,
            "quiz_assignment": [co.value for co in obj_in.quiz_assignment],
        }
        db_obj = self.get_by_subject(db, obj_in.subject_code)
        if db_obj:
            return self.update(db, db_obj=db_obj, obj_in=values, commit=commit)
        return self.create(db, obj_in={"subject_code": obj_in.subject_code, **values}, commit=commit)


class CRUDScoreSheet(CRUDBase[ScoreSheet, ScoreSheetCreate, ScoreSheetUpdate]):

    def get(self, db: Session, enrollment_number: str, subject_code: str) -> Optional[ScoreSheet]:
        return db.get(ScoreSheet, (enrollment_number, subject_code))

    def get_by_subject(self, db: Session, subject_code: str) -> List[ScoreSheet]:
        return (
            db.query(ScoreSheet)
            .filter(ScoreSheet.subject_code == subject_code)
            .order_by(ScoreSheet.enrollment_number)
            .all()
        )


subject = CRUDSubject(Subject)
co_mapping = CRUDCOMapping(COMapping)
score_sheet = CRUDScoreSheet(ScoreSheet)

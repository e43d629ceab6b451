from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, InvalidStateError
from app.crud.subject import subject as crud_subject, co_mapping as crud_co_mapping, score_sheet as crud_score_sheet
from app.schemas.co import (
    SubjectCreate, Subject, COMappingCreate, COMapping, ScoreSheetCreate, ScoreSheetUpdate, ScoreSheet
)
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper


class COService:

    def _require_subject(self, db: Session, subject_code: str):
        subject = crud_subject.get(db, code=subject_code)
        if not subject:
            raise NotFoundError("Subject", subject_code)
        return subject

    def create_subject(self, db: Session, subject_in: SubjectCreate, current_user_context: UserContext) -> Subject:
        permission_helper.require_teacher_or_admin(current_user_context)
        if crud_subject.get(db, code=subject_in.code):
            raise InvalidStateError("Subject already exists.", details={"subject_code": subject_in.code})
        subject = crud_subject.create(
            db, obj_in={**subject_in.model_dump(), "teacher_id": current_user_context.user.id}
        )
        return Subject.model_validate(subject)

    def list_subjects(self, db: Session, current_user_context: UserContext) -> List[Subject]:
        permission_helper.require_teacher_or_admin(current_user_context)
        return [Subject.model_validate(s) for s in crud_subject.get_multi(db)]

    def upsert_co_mapping(self, db: Session, mapping_in: COMappingCreate, current_user_context: UserContext) -> COMapping:
        permission_helper.require_teacher_or_admin(current_user_context)
        self._require_subject(db, mapping_in.subject_code)
        mapping = crud_co_mapping.upsert(db, obj_in=mapping_in)
        return COMapping.model_validate(mapping)

    def get_co_mapping(self, db: Session, subject_code: str, current_user_context: UserContext) -> COMapping:
        permission_helper.require_teacher_or_admin(current_user_context)
        mapping = crud_co_mapping.get_by_subject(db, subject_code=subject_code)
        if not mapping:
            raise NotFoundError("CO mapping", subject_code)
        return COMapping.model_validate(mapping)

    def create_sheet_row(self, db: Session, row_in: ScoreSheetCreate, current_user_context: UserContext) -> ScoreSheet:
        permission_helper.require_teacher_or_admin(current_user_context)
        self._require_subject(db, row_in.subject_code)
        if crud_score_sheet.get(db, row_in.enrollment_number, row_in.subject_code):
            raise InvalidStateError(
                "Marks for this student and subject already exist.",
                details={"enrollment_number": row_in.enrollment_number, "subject_code": row_in.subject_code},
            )
        try:
            row = crud_score_sheet.create(db, obj_in=row_in)
        except IntegrityError:
            db.rollback()
            raise InvalidStateError(
                "Marks for this student and subject already exist.",
                details={"enrollment_number": row_in.enrollment_number, "subject_code": row_in.subject_code},
            )
        return ScoreSheet.model_validate(row)

    def list_sheet_rows(self, db: Session, subject_code: str, current_user_context: UserContext) -> List[ScoreSheet]:
        permission_helper.require_teacher_or_admin(current_user_context)
        self._require_subject(db, subject_code)
        return [ScoreSheet.model_validate(r) for r in crud_score_sheet.get_by_subject(db, subject_code=subject_code)]

    def update_sheet_row(self, db: Session, enrollment_number: str, subject_code: str, row_in: ScoreSheetUpdate, current_user_context: UserContext) -> ScoreSheet:
        permission_helper.require_teacher_or_admin(current_user_context)
        row = crud_score_sheet.get(db, enrollment_number, subject_code)
        if not row:
            raise NotFoundError("Score sheet row", f"{enrollment_number}/{subject_code}")
        row = crud_score_sheet.update(db, db_obj=row, obj_in=row_in)
        return ScoreSheet.model_validate(row)


co_service = COService()

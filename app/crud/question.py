from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.question import Question, Option
from app.schemas.question import QuestionCreate, QuestionUpdate


class CRUDQuestion(CRUDBase[Question, QuestionCreate, QuestionUpdate]):

    def get(self, db: Session, id: str) -> Optional[Question]:
        return (
            db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.id == id)
            .first()
        )

    def get_by_quiz(self, db: Session, quiz_id: str) -> List[Question]:
        return (
            db.query(Question)
            .options(selectinload(Question.options))
            .filter(Question.quiz_id == quiz_id)
            .order_by(Question.order)
            .all()
        )

    def create_with_options(self, db: Session, *, quiz_id: str, obj_in: QuestionCreate, commit: bool = True) -> Question:
        data = obj_in.model_dump(exclude={"options"})
        db_obj = Question(quiz_id=quiz_id, **data)
        db_obj.options = [Option(text=o.text, is_correct=o.is_correct) for o in obj_in.options]
        db.add(db_obj)
        db.flush()
        if commit:
            db.commit()
        db.refresh(db_obj)
        return db_obj

    def replace(self, db: Session, *, db_obj: Question, obj_in: QuestionUpdate, commit: bool = True) -> Question:
        data = obj_in.model_dump(exclude={"options"})
        for field, value in data.items():
            setattr(db_obj, field, value)
        # delete-orphan cascade drops the previous options
        db_obj.options = [Option(text=o.text, is_correct=o.is_correct) for o in obj_in.options]
        db.add(db_obj)
        db.flush()
        if commit:
            db.commit()
        db.refresh(db_obj)
        return db_obj


question = CRUDQuestion(Question)

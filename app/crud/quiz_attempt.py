from datetime import datetime
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from app.core.constants import QuizAttemptStatusEnum
from app.crud.base import CRUDBase
from app.models.quiz_attempt import QuizAttempt, Answer
from app.schemas.quiz_attempt import QuizAttemptCreate, QuizAttemptUpdate


class CRUDQuizAttempt(CRUDBase[QuizAttempt, QuizAttemptCreate, QuizAttemptUpdate]):

    def _query_with_relationships(self, db: Session):
        return db.query(QuizAttempt).options(
            selectinload(QuizAttempt.quiz),
            selectinload(QuizAttempt.user),
            selectinload(QuizAttempt.answers),
        )

    def get(self, db: Session, id: str) -> Optional[QuizAttempt]:
        return self._query_with_relationships(db).filter(QuizAttempt.id == id).first()

    def get_by_user_and_quiz(self, db: Session, user_id: int, quiz_id: str) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .first()
        )

    def get_all_by_quiz(self, db: Session, quiz_id: str) -> List[QuizAttempt]:
        return (
            self._query_with_relationships(db)
            .filter(QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.started_at.desc())
            .all()
        )

    def get_submitted_by_user(self, db: Session, user_id: int) -> List[QuizAttempt]:
        return (
            self._query_with_relationships(db)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.status == QuizAttemptStatusEnum.SUBMITTED,
            )
            .order_by(QuizAttempt.submitted_at.desc())
            .all()
        )

    def get_user_quiz_statuses(self, db: Session, user_id: int) -> dict:
        rows = (
            db.query(QuizAttempt.quiz_id, QuizAttempt.status)
            .filter(QuizAttempt.user_id == user_id)
            .all()
        )
        return {quiz_id: status for quiz_id, status in rows}

    def mark_submitted(self, db: Session, *, attempt_id: str, score: float, submitted_at: datetime) -> int:
        """Compare-and-set IN_PROGRESS -> SUBMITTED. Returns the number of rows flipped."""
        result = db.execute(
            update(QuizAttempt)
            .where(
                QuizAttempt.id == attempt_id,
                QuizAttempt.status == QuizAttemptStatusEnum.IN_PROGRESS,
            )
            .values(
                status=QuizAttemptStatusEnum.SUBMITTED,
                score=score,
                submitted_at=submitted_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class CRUDAnswer(CRUDBase[Answer, QuizAttemptCreate, QuizAttemptUpdate]):

    def get_all_by_attempt(self, db: Session, attempt_id: str) -> List[Answer]:
        return db.query(Answer).filter(Answer.attempt_id == attempt_id).order_by(Answer.id).all()

    def add_many(self, db: Session, answers: List[Answer]) -> None:
        db.add_all(answers)
        db.flush()


quiz_attempt = CRUDQuizAttempt(QuizAttempt)
answer = CRUDAnswer(Answer)

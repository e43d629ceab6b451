from datetime import datetime
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session, selectinload

from app.crud.base import CRUDBase
from app.models.quiz import Quiz, quiz_courses_association, quiz_teachers_association
from app.models.question import Question
from app.schemas.quiz import QuizCreate, QuizUpdate


class CRUDQuiz(CRUDBase[Quiz, QuizCreate, QuizUpdate]):

    def _query_with_relationships(self, db: Session):
        return db.query(Quiz).options(
            selectinload(Quiz.courses),
            selectinload(Quiz.teachers),
            selectinload(Quiz.questions).selectinload(Question.options),
        )

    def get(self, db: Session, id: str) -> Optional[Quiz]:
        return self._query_with_relationships(db).filter(Quiz.id == id).first()

    def get_by_teacher(self, db: Session, teacher_id: int) -> List[Quiz]:
        return (
            self._query_with_relationships(db)
            .join(quiz_teachers_association, quiz_teachers_association.c.quiz_id == Quiz.id)
            .filter(quiz_teachers_association.c.user_id == teacher_id)
            .order_by(Quiz.created_at.desc())
            .all()
        )

    def get_by_course_ids(self, db: Session, course_ids: List[int]) -> List[Quiz]:
        if not course_ids:
            return []
        return (
            self._query_with_relationships(db)
            .join(quiz_courses_association, quiz_courses_association.c.quiz_id == Quiz.id)
            .filter(quiz_courses_association.c.course_id.in_(course_ids))
            .distinct()
            .order_by(Quiz.created_at.desc())
            .all()
        )

    def get_open_candidates_by_course_ids(self, db: Session, course_ids: List[int]) -> List[Quiz]:
        """Active quizzes; the schedule window check happens in Python."""
        if not course_ids:
            return []
        return (
            self._query_with_relationships(db)
            .join(quiz_courses_association, quiz_courses_association.c.quiz_id == Quiz.id)
            .filter(quiz_courses_association.c.course_id.in_(course_ids))
            .filter(Quiz.is_active.is_(True))
            .distinct()
            .all()
        )

    def get_scheduled_before(self, db: Session, course_ids: List[int], moment: datetime) -> List[Quiz]:
        if not course_ids:
            return []
        return (
            db.query(Quiz)
            .join(quiz_courses_association, quiz_courses_association.c.quiz_id == Quiz.id)
            .filter(quiz_courses_association.c.course_id.in_(course_ids))
            .filter(and_(Quiz.scheduled_for.isnot(None), Quiz.scheduled_for <= moment))
            .distinct()
            .all()
        )


quiz = CRUDQuiz(Quiz)

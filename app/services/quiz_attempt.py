import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import QuizAttemptStatusEnum
from app.core.exceptions import NotFoundError, ForbiddenError, InvalidStateError, TransientStoreError
from app.crud.quiz import quiz as crud_quiz
from app.crud.question import question as crud_question
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt, answer as crud_answer
from app.crud.course_enrollment import enrollment as crud_enrollment
from app.models.quiz import Quiz as QuizModel
from app.models.quiz_attempt import QuizAttempt as QuizAttemptModel, Answer as AnswerModel
from app.schemas.quiz import QuizSummary, StudentQuizPaper
from app.schemas.quiz_attempt import (
    QuizAttemptCreate, QuizAttempt, QuizAttemptDetails, SubmitAttemptRequest, QuizStats, QuizHistoryItem
)
from app.schemas.user import UserContext
from app.services.grading import grade_answer
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_quiz_open(quiz: QuizModel, now: Optional[datetime] = None) -> bool:
    """Active quizzes are open; a scheduled one only for ``time_limit`` minutes from ``scheduled_for``."""
    if not quiz.is_active:
        return False
    now = now or _utcnow()
    if quiz.scheduled_for is not None:
        start = _as_utc(quiz.scheduled_for)
        return start <= now < start + timedelta(minutes=quiz.time_limit)
    return True


def is_quiz_missed(quiz: QuizModel, now: Optional[datetime] = None) -> bool:
    now = now or _utcnow()
    if quiz.scheduled_for is not None:
        return now > _as_utc(quiz.scheduled_for) + timedelta(minutes=quiz.time_limit)
    return not quiz.is_active


class QuizAttemptService:

    def _require_enrollment(self, db: Session, current_user_context: UserContext, quiz: QuizModel):
        if not crud_enrollment.has_accepted_enrollment(
            db, user_id=current_user_context.user.id, course_ids=quiz.course_ids
        ):
            raise ForbiddenError("You must be enrolled in one of this quiz's courses.")

    def _get_student_quiz(self, db: Session, quiz_id: str, current_user_context: UserContext) -> QuizModel:
        permission_helper.require_student(current_user_context, "Only students can take quizzes.")
        quiz = crud_quiz.get(db, id=quiz_id)
        if not quiz:
            raise NotFoundError("Quiz", quiz_id)
        self._require_enrollment(db, current_user_context, quiz)
        return quiz

    def _details(self, attempt: QuizAttemptModel) -> QuizAttemptDetails:
        details = QuizAttemptDetails.model_validate(attempt)
        if attempt.quiz is not None:
            details.quiz_title = attempt.quiz.title
            details.max_marks = attempt.quiz.max_marks
        return details

    def start_attempt(self, db: Session, quiz_id: str, current_user_context: UserContext) -> QuizAttempt:
        quiz = self._get_student_quiz(db, quiz_id, current_user_context)
        user_id = current_user_context.user.id

        if not is_quiz_open(quiz):
            raise InvalidStateError("This quiz is not open for attempts.", details={"quiz_id": quiz_id})

        existing = crud_quiz_attempt.get_by_user_and_quiz(db, user_id=user_id, quiz_id=quiz_id)
        if existing and existing.status == QuizAttemptStatusEnum.SUBMITTED:
            raise InvalidStateError(
                "You have already submitted this quiz.",
                details={"attempt_id": existing.id, "status": existing.status.value},
            )
        if existing:
            raise InvalidStateError(
                "An attempt for this quiz is already in progress.",
                details={"attempt_id": existing.id, "status": existing.status.value},
            )

        # The (quiz_id, user_id) unique constraint settles concurrent starts.
        try:
            attempt = crud_quiz_attempt.create(db, obj_in=QuizAttemptCreate(quiz_id=quiz_id, user_id=user_id))
        except IntegrityError:
            db.rollback()
            raise InvalidStateError("An attempt for this quiz already exists.", details={"quiz_id": quiz_id})
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to start attempt on quiz %s for user %s", quiz_id, user_id)
            raise TransientStoreError()

        logger.info("User %s started attempt %s on quiz %s", user_id, attempt.id, quiz_id)
        return QuizAttempt.model_validate(attempt)

    def submit_attempt(self, db: Session, attempt_id: str, submission: SubmitAttemptRequest, current_user_context: UserContext) -> QuizAttemptDetails:
        attempt = crud_quiz_attempt.get(db, id=attempt_id)
        if not attempt:
            raise NotFoundError("Quiz attempt", attempt_id)
        if attempt.user_id != current_user_context.user.id:
            raise ForbiddenError("You can only submit your own attempts.")
        if attempt.status != QuizAttemptStatusEnum.IN_PROGRESS:
            raise InvalidStateError(
                "This attempt has already been submitted.",
                details={"attempt_id": attempt_id, "status": attempt.status.value},
            )

        questions = {q.id: q for q in crud_question.get_by_quiz(db, quiz_id=attempt.quiz_id)}
        rows: List[AnswerModel] = []
        seen = set()
        total = 0.0

        for submitted in submission.answers:
            question = questions.get(submitted.question_id)
            if question is None:
                logger.warning(
                    "Attempt %s: skipping answer for question %s outside quiz %s",
                    attempt_id, submitted.question_id, attempt.quiz_id,
                )
                continue
            if question.id in seen:
                logger.warning("Attempt %s: skipping repeated answer for question %s", attempt_id, question.id)
                continue
            seen.add(question.id)

            result = grade_answer(question, submitted.selected_options, submitted.text_answer)
            rows.append(AnswerModel(
                attempt_id=attempt_id,
                question_id=question.id,
                selected_options=list(submitted.selected_options),
                text_answer=submitted.text_answer or "",
                is_correct=result.is_correct,
                score=result.score,
                keyword_match_percentage=result.keyword_match_percentage,
            ))
            total += result.score

        # Answers and the status flip commit together or not at all.
        try:
            crud_answer.add_many(db, rows)
            flipped = crud_quiz_attempt.mark_submitted(
                db, attempt_id=attempt_id, score=total, submitted_at=_utcnow()
            )
            if flipped != 1:
                db.rollback()
                raise InvalidStateError(
                    "This attempt has already been submitted.", details={"attempt_id": attempt_id}
                )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise InvalidStateError(
                "This attempt has already been submitted.", details={"attempt_id": attempt_id}
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to submit attempt %s", attempt_id)
            raise TransientStoreError()

        logger.info(
            "Attempt %s submitted: %d answers graded, score %.2f", attempt_id, len(rows), total
        )
        return self._details(crud_quiz_attempt.get(db, id=attempt_id))

    def list_available_quizzes(self, db: Session, current_user_context: UserContext) -> List[QuizSummary]:
        permission_helper.require_student(current_user_context)
        user_id = current_user_context.user.id
        course_ids = crud_enrollment.get_accepted_course_ids(db, user_id=user_id)
        candidates = crud_quiz.get_open_candidates_by_course_ids(db, course_ids)
        statuses = crud_quiz_attempt.get_user_quiz_statuses(db, user_id=user_id)

        now = _utcnow()
        available = [
            q for q in candidates
            if is_quiz_open(q, now) and statuses.get(q.id) != QuizAttemptStatusEnum.SUBMITTED
        ]
        available.sort(key=lambda q: q.created_at or now, reverse=True)
        return [QuizSummary.model_validate(q) for q in available]

    def get_quiz_for_student(self, db: Session, quiz_id: str, current_user_context: UserContext) -> StudentQuizPaper:
        quiz = self._get_student_quiz(db, quiz_id, current_user_context)
        existing = crud_quiz_attempt.get_by_user_and_quiz(db, user_id=current_user_context.user.id, quiz_id=quiz_id)
        if existing and existing.status == QuizAttemptStatusEnum.SUBMITTED:
            raise InvalidStateError("You have already submitted this quiz.", details={"attempt_id": existing.id})
        if not is_quiz_open(quiz):
            raise InvalidStateError("This quiz is not open for attempts.", details={"quiz_id": quiz_id})
        return StudentQuizPaper.model_validate(quiz)

    def get_stats(self, db: Session, current_user_context: UserContext) -> QuizStats:
        permission_helper.require_student(current_user_context)
        user_id = current_user_context.user.id
        course_ids = crud_enrollment.get_accepted_course_ids(db, user_id=user_id)
        quizzes = crud_quiz.get_by_course_ids(db, course_ids)
        statuses = crud_quiz_attempt.get_user_quiz_statuses(db, user_id=user_id)

        now = _utcnow()
        stats = QuizStats()
        for q in quizzes:
            if statuses.get(q.id) == QuizAttemptStatusEnum.SUBMITTED:
                stats.completed += 1
            elif is_quiz_missed(q, now):
                stats.missed += 1
            else:
                stats.upcoming += 1
        return stats

    def get_history(self, db: Session, current_user_context: UserContext) -> List[QuizHistoryItem]:
        permission_helper.require_student(current_user_context)
        user_id = current_user_context.user.id

        history = [
            QuizHistoryItem(
                quiz_id=a.quiz_id,
                title=a.quiz.title,
                status=QuizAttemptStatusEnum.SUBMITTED.value,
                attempt_id=a.id,
                score=a.score,
                max_marks=a.quiz.max_marks,
                scheduled_for=a.quiz.scheduled_for,
                submitted_at=a.submitted_at,
            )
            for a in crud_quiz_attempt.get_submitted_by_user(db, user_id=user_id)
        ]

        now = _utcnow()
        course_ids = crud_enrollment.get_accepted_course_ids(db, user_id=user_id)
        statuses = crud_quiz_attempt.get_user_quiz_statuses(db, user_id=user_id)
        missed = [
            q for q in crud_quiz.get_scheduled_before(db, course_ids, now)
            if q.id not in statuses and is_quiz_missed(q, now)
        ]
        missed.sort(key=lambda q: _as_utc(q.scheduled_for), reverse=True)
        history.extend(
            QuizHistoryItem(
                quiz_id=q.id,
                title=q.title,
                status="MISSED",
                max_marks=q.max_marks,
                scheduled_for=q.scheduled_for,
            )
            for q in missed
        )
        return history

    def get_attempt(self, db: Session, attempt_id: str, current_user_context: UserContext) -> QuizAttemptDetails:
        attempt = crud_quiz_attempt.get(db, id=attempt_id)
        if not attempt:
            raise NotFoundError("Quiz attempt", attempt_id)

        if attempt.user_id != current_user_context.user.id:
            if permission_helper.is_student(current_user_context):
                raise ForbiddenError("You can only view your own quiz attempts.")
            quiz = crud_quiz.get(db, id=attempt.quiz_id)
            permission_helper.require_quiz_management_permission(current_user_context, quiz)

        return self._details(attempt)


quiz_attempt_service = QuizAttemptService()

import logging
from typing import List
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.crud.quiz import quiz as crud_quiz
from app.crud.question import question as crud_question
from app.crud.course import course as crud_course
from app.crud.user import user as crud_user
from app.crud.quiz_attempt import quiz_attempt as crud_quiz_attempt
from app.models.quiz import Quiz as QuizModel
from app.schemas.quiz import QuizCreate, QuizUpdate, Quiz
from app.schemas.question import QuestionCreate, QuestionUpdate, Question
from app.schemas.quiz_attempt import QuizAttemptDetails
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class QuizService:

    def _get_courses(self, db: Session, course_ids: List[int]):
        unique_ids = list(dict.fromkeys(course_ids))
        courses = crud_course.get_by_ids(db, unique_ids)
        found = {course.id for course in courses}
        missing = [course_id for course_id in unique_ids if course_id not in found]
        if missing:
            raise NotFoundError("Course", missing)
        return courses

    def _get_managed_quiz(self, db: Session, quiz_id: str, current_user_context: UserContext) -> QuizModel:
        permission_helper.require_teacher_or_admin(current_user_context, "Students cannot manage quizzes.")
        quiz = crud_quiz.get(db, id=quiz_id)
        if not quiz:
            raise NotFoundError("Quiz", quiz_id)
        permission_helper.require_quiz_management_permission(current_user_context, quiz)
        return quiz

    def create_quiz(self, db: Session, quiz_in: QuizCreate, current_user_context: UserContext) -> Quiz:
        permission_helper.require_teacher_or_admin(current_user_context, "Students cannot create quizzes.")
        courses = self._get_courses(db, quiz_in.course_ids)
        creator = crud_user.get(db, id=current_user_context.user.id)

        quiz = QuizModel(
            **quiz_in.model_dump(exclude={"course_ids"}),
            is_active=False,
            created_by_id=creator.id,
        )
        quiz.courses = courses
        quiz.teachers = [creator]
        db.add(quiz)
        db.commit()

        logger.info("Quiz %s created by user %s", quiz.id, creator.id)
        return Quiz.model_validate(crud_quiz.get(db, id=quiz.id))

    def get_quiz(self, db: Session, quiz_id: str, current_user_context: UserContext) -> Quiz:
        return Quiz.model_validate(self._get_managed_quiz(db, quiz_id, current_user_context))

    def get_my_quizzes(self, db: Session, current_user_context: UserContext) -> List[Quiz]:
        permission_helper.require_teacher_or_admin(current_user_context, "Students cannot manage quizzes.")
        quizzes = crud_quiz.get_by_teacher(db, teacher_id=current_user_context.user.id)
        return [Quiz.model_validate(q) for q in quizzes]

    def update_quiz(self, db: Session, quiz_id: str, quiz_in: QuizUpdate, current_user_context: UserContext) -> Quiz:
        quiz = self._get_managed_quiz(db, quiz_id, current_user_context)
        update_data = quiz_in.model_dump(exclude_unset=True, exclude={"course_ids"})

        if quiz_in.course_ids is not None:
            quiz.courses = self._get_courses(db, quiz_in.course_ids)

        crud_quiz.update(db, db_obj=quiz, obj_in=update_data)
        return Quiz.model_validate(crud_quiz.get(db, id=quiz_id))

    def delete_quiz(self, db: Session, quiz_id: str, current_user_context: UserContext) -> None:
        quiz = self._get_managed_quiz(db, quiz_id, current_user_context)
        # questions, options, attempts and answers go with it (ORM + FK cascade)
        crud_quiz.remove(db, db_obj=quiz)
        logger.info("Quiz %s deleted by user %s", quiz_id, current_user_context.user.id)

    def toggle_quiz_status(self, db: Session, quiz_id: str, current_user_context: UserContext) -> Quiz:
        quiz = self._get_managed_quiz(db, quiz_id, current_user_context)
        crud_quiz.update(db, db_obj=quiz, obj_in={"is_active": not quiz.is_active})
        return Quiz.model_validate(crud_quiz.get(db, id=quiz_id))

    def add_question(self, db: Session, quiz_id: str, question_in: QuestionCreate, current_user_context: UserContext) -> Question:
        quiz = self._get_managed_quiz(db, quiz_id, current_user_context)
        question = crud_question.create_with_options(db, quiz_id=quiz.id, obj_in=question_in)
        return Question.model_validate(question)

    def _get_quiz_question(self, db: Session, quiz_id: str, question_id: str):
        question = crud_question.get(db, id=question_id)
        if not question or question.quiz_id != quiz_id:
            raise NotFoundError("Question", question_id)
        return question

    def update_question(self, db: Session, quiz_id: str, question_id: str, question_in: QuestionUpdate, current_user_context: UserContext) -> Question:
        self._get_managed_quiz(db, quiz_id, current_user_context)
        question = self._get_quiz_question(db, quiz_id, question_id)
        question = crud_question.replace(db, db_obj=question, obj_in=question_in)
        return Question.model_validate(question)

    def delete_question(self, db: Session, quiz_id: str, question_id: str, current_user_context: UserContext) -> None:
        self._get_managed_quiz(db, quiz_id, current_user_context)
        question = self._get_quiz_question(db, quiz_id, question_id)
        crud_question.remove(db, db_obj=question)

    def get_quiz_attempts(self, db: Session, quiz_id: str, current_user_context: UserContext) -> List[QuizAttemptDetails]:
        quiz = self._get_managed_quiz(db, quiz_id, current_user_context)
        attempts = crud_quiz_attempt.get_all_by_quiz(db, quiz_id=quiz.id)
        return [
            QuizAttemptDetails.model_validate(a).model_copy(
                update={"quiz_title": quiz.title, "max_marks": quiz.max_marks}
            )
            for a in attempts
        ]


quiz_service = QuizService()

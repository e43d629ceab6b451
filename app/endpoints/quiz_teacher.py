from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.quiz import Quiz, QuizCreate, QuizUpdate
from app.schemas.question import Question, QuestionCreate, QuestionUpdate
from app.schemas.quiz_attempt import QuizAttemptDetails
from app.schemas.user import UserContext
from app.services.quiz import quiz_service

router = APIRouter()

@router.post("/", response_model=APIResponse[Quiz], status_code=status.HTTP_201_CREATED)
async def create_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_in: QuizCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_quiz = quiz_service.create_quiz(db, quiz_in=quiz_in, current_user_context=context)
    return APIResponse(message="Quiz created successfully", data=new_quiz)


@router.get("/my-quizzes", response_model=APIResponse[List[Quiz]])
async def get_my_quizzes(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quizzes = quiz_service.get_my_quizzes(db, current_user_context=context)
    return APIResponse(message="Quizzes retrieved successfully", data=quizzes)


@router.get("/{quiz_id}", response_model=APIResponse[Quiz])
async def get_quiz(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz = quiz_service.get_quiz(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz retrieved successfully", data=quiz)


@router.put("/{quiz_id}", response_model=APIResponse[Quiz])
async def update_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    quiz_in: QuizUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_quiz = quiz_service.update_quiz(db, quiz_id=quiz_id, quiz_in=quiz_in, current_user_context=context)
    return APIResponse(message="Quiz updated successfully", data=updated_quiz)


@router.delete("/{quiz_id}", response_model=APIResponse[None])
async def delete_quiz(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz_service.delete_quiz(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz deleted successfully")


@router.patch("/{quiz_id}/toggle-status", response_model=APIResponse[Quiz])
async def toggle_quiz_status(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz = quiz_service.toggle_quiz_status(db, quiz_id=quiz_id, current_user_context=context)
    state = "activated" if quiz.is_active else "deactivated"
    return APIResponse(message=f"Quiz {state} successfully", data=quiz)


@router.post("/{quiz_id}/questions", response_model=APIResponse[Question], status_code=status.HTTP_201_CREATED)
async def add_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    question_in: QuestionCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    question = quiz_service.add_question(db, quiz_id=quiz_id, question_in=question_in, current_user_context=context)
    return APIResponse(message="Question added successfully", data=question)


@router.put("/{quiz_id}/questions/{question_id}", response_model=APIResponse[Question])
async def update_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    question_id: str,
    question_in: QuestionUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    question = quiz_service.update_question(
        db, quiz_id=quiz_id, question_id=question_id, question_in=question_in, current_user_context=context
    )
    return APIResponse(message="Question updated successfully", data=question)


@router.delete("/{quiz_id}/questions/{question_id}", response_model=APIResponse[None])
async def delete_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    quiz_id: str,
    question_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz_service.delete_question(db, quiz_id=quiz_id, question_id=question_id, current_user_context=context)
    return APIResponse(message="Question deleted successfully")


@router.get("/{quiz_id}/attempts", response_model=APIResponse[List[QuizAttemptDetails]])
async def get_quiz_attempts(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempts = quiz_service.get_quiz_attempts(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz attempts retrieved successfully", data=attempts)

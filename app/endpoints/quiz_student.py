from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.quiz import QuizSummary, StudentQuizPaper
from app.schemas.quiz_attempt import QuizAttempt, QuizAttemptDetails, SubmitAttemptRequest, QuizStats, QuizHistoryItem
from app.schemas.user import UserContext
from app.services.quiz_attempt import quiz_attempt_service

router = APIRouter()

@router.get("/available", response_model=APIResponse[List[QuizSummary]])
async def list_available_quizzes(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quizzes = quiz_attempt_service.list_available_quizzes(db, current_user_context=context)
    return APIResponse(message="Available quizzes retrieved successfully", data=quizzes)


@router.get("/stats", response_model=APIResponse[QuizStats])
async def get_quiz_stats(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    stats = quiz_attempt_service.get_stats(db, current_user_context=context)
    return APIResponse(message="Quiz stats retrieved successfully", data=stats)


@router.get("/history", response_model=APIResponse[List[QuizHistoryItem]])
async def get_quiz_history(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    history = quiz_attempt_service.get_history(db, current_user_context=context)
    return APIResponse(message="Quiz history retrieved successfully", data=history)


@router.get("/attempts/{attempt_id}", response_model=APIResponse[QuizAttemptDetails])
async def get_attempt(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = quiz_attempt_service.get_attempt(db, attempt_id=attempt_id, current_user_context=context)
    return APIResponse(message="Quiz attempt retrieved successfully", data=attempt)


@router.post("/attempts/{attempt_id}/submit", response_model=APIResponse[QuizAttemptDetails])
async def submit_attempt(
    *,
    db: Session = Depends(deps.get_db),
    attempt_id: str,
    submission: SubmitAttemptRequest,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = quiz_attempt_service.submit_attempt(
        db, attempt_id=attempt_id, submission=submission, current_user_context=context
    )
    return APIResponse(message="Quiz submitted successfully", data=attempt)


@router.get("/{quiz_id}", response_model=APIResponse[StudentQuizPaper])
async def get_quiz_for_student(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    quiz = quiz_attempt_service.get_quiz_for_student(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz retrieved successfully", data=quiz)


@router.post("/{quiz_id}/start", response_model=APIResponse[QuizAttempt], status_code=status.HTTP_201_CREATED)
async def start_attempt(
    *,
    db: Session = Depends(deps.get_db),
    quiz_id: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = quiz_attempt_service.start_attempt(db, quiz_id=quiz_id, current_user_context=context)
    return APIResponse(message="Quiz attempt started", data=attempt)

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.co import (
    Subject, SubjectCreate, COMapping, COMappingCreate, ScoreSheet, ScoreSheetCreate, ScoreSheetUpdate
)
from app.schemas.user import UserContext
from app.services.co import co_service

router = APIRouter()

@router.post("/subjects", response_model=APIResponse[Subject], status_code=status.HTTP_201_CREATED)
async def create_subject(
    *,
    db: Session = Depends(deps.get_transactional_db),
    subject_in: SubjectCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    subject = co_service.create_subject(db, subject_in=subject_in, current_user_context=context)
    return APIResponse(message="Subject created successfully", data=subject)


@router.get("/subjects", response_model=APIResponse[List[Subject]])
async def list_subjects(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    subjects = co_service.list_subjects(db, current_user_context=context)
    return APIResponse(message="Subjects retrieved successfully", data=subjects)


@router.post("/mappings", response_model=APIResponse[COMapping])
async def upsert_co_mapping(
    *,
    db: Session = Depends(deps.get_transactional_db),
    mapping_in: COMappingCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    mapping = co_service.upsert_co_mapping(db, mapping_in=mapping_in, current_user_context=context)
    return APIResponse(message="CO mapping saved successfully", data=mapping)


@router.get("/mappings/{subject_code}", response_model=APIResponse[COMapping])
async def get_co_mapping(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    mapping = co_service.get_co_mapping(db, subject_code=subject_code, current_user_context=context)
    return APIResponse(message="CO mapping retrieved successfully", data=mapping)


@router.post("/sheets", response_model=APIResponse[ScoreSheet], status_code=status.HTTP_201_CREATED)
async def create_sheet_row(
    *,
    db: Session = Depends(deps.get_transactional_db),
    row_in: ScoreSheetCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    row = co_service.create_sheet_row(db, row_in=row_in, current_user_context=context)
    return APIResponse(message="Marks saved successfully", data=row)


@router.get("/sheets", response_model=APIResponse[List[ScoreSheet]])
async def list_sheet_rows(
    *,
    db: Session = Depends(deps.get_db),
    subject_code: str,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    rows = co_service.list_sheet_rows(db, subject_code=subject_code, current_user_context=context)
    return APIResponse(message="Marks retrieved successfully", data=rows)


@router.put("/sheets/{enrollment_number}/{subject_code}", response_model=APIResponse[ScoreSheet])
async def update_sheet_row(
    *,
    db: Session = Depends(deps.get_transactional_db),
    enrollment_number: str,
    subject_code: str,
    row_in: ScoreSheetUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    row = co_service.update_sheet_row(
        db, enrollment_number=enrollment_number, subject_code=subject_code, row_in=row_in, current_user_context=context
    )
    return APIResponse(message="Marks updated successfully", data=row)

"""
HTTP routes for the submission API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from backend.db import DbClient
from backend.dependencies import get_db_client, require_bearer_token
from backend.schemas import (
    ErrorResponse,
    SubmissionRecordResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
    UserProfileResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/user/{email}",
    response_model=UserProfileResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_user(email: str, db: DbClient = Depends(get_db_client)):
    try:
        record = db.get_submission(email)
    except SQLAlchemyError:
        logger.exception("Failed to get user %s", email)
        raise HTTPException(status_code=500, detail="Failed to get user")
    if not record:
        raise HTTPException(status_code=404, detail="User not found")
    return UserProfileResponse(**record.as_profile())


@router.post(
    "/submit-quiz",
    response_model=SubmitQuizResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def submit_quiz(
    payload: SubmitQuizRequest,
    token: str = Depends(require_bearer_token),
    db: DbClient = Depends(get_db_client),
):
    """
    Upsert the submission for ``payload.email``.

    A resubmission replaces the answers and phone number and sends the
    record back to ``pending``.
    """
    try:
        record = db.upsert_submission(
            user_id=payload.userId,
            email=payload.email,
            name=payload.name,
            phone_number=payload.phoneNumber,
            answers=payload.answers,
        )
    except SQLAlchemyError:
        logger.exception("Error saving quiz for %s", payload.email)
        raise HTTPException(status_code=500, detail="Failed to save quiz")
    logger.info("Saved quiz submission %s for %s", record.id, record.email)
    return SubmitQuizResponse(quiz=SubmissionRecordResponse(**record.as_dict()))


@router.get(
    "/my-quiz",
    status_code=400,
    response_model=ErrorResponse,
    responses={401: {"model": ErrorResponse}},
)
def my_quiz(token: str = Depends(require_bearer_token)):
    # The token is never decoded, so there is no email to look up.
    raise HTTPException(status_code=400, detail="Use /api/user/:email instead")

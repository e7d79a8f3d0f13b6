"""
Pydantic schemas for the submission API.

Field names follow the camelCase wire format used by the web client.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class SubmitQuizRequest(BaseModel):
    userId: Optional[str] = None
    email: str = Field(..., min_length=3, max_length=320)
    name: Optional[str] = None
    phoneNumber: Optional[str] = None
    answers: dict[str, Any] = Field(default_factory=dict)


class SubmissionRecordResponse(BaseModel):
    id: str
    userId: Optional[str] = None
    email: str
    name: Optional[str] = None
    phoneNumber: Optional[str] = None
    answers: dict[str, Any]
    status: Literal["pending", "matched", "contacted"]
    createdAt: str


class SubmitQuizResponse(BaseModel):
    success: Literal[True] = True
    quiz: SubmissionRecordResponse


class UserProfileResponse(BaseModel):
    id: Optional[str] = None
    email: str
    name: Optional[str] = None
    picture: str = ""
    phoneNumber: Optional[str] = None
    answers: dict[str, Any]
    status: Literal["pending", "matched", "contacted"]
    submittedAt: str


class ErrorResponse(BaseModel):
    error: str

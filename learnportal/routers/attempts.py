"""
Attempts Router

Endpoints for starting and submitting exam attempts.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer

router = APIRouter()


class StartAttemptRequest(BaseModel):
    user_id: str
    exam_id: str


class SubmitAttemptRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict, description="Question id to selected option index")


@router.post("/attempts", status_code=201)
async def start_attempt(body: StartAttemptRequest, services: ServiceContainer = Depends(get_services)):
    started = await services.workflow.start_exam(body.user_id, body.exam_id)
    return APIResponse.success(started.to_dict(), "Attempt started")


@router.post("/attempts/{attempt_id}/submit")
async def submit_attempt(
    attempt_id: str,
    body: SubmitAttemptRequest,
    services: ServiceContainer = Depends(get_services)
):
    outcome = await services.workflow.submit_exam(attempt_id, body.answers)
    return APIResponse.success(outcome.to_dict(), "Attempt submitted")


@router.get("/attempts/{attempt_id}")
async def get_attempt(attempt_id: str, services: ServiceContainer = Depends(get_services)):
    attempt = await services.attempts.find_by_id(attempt_id)
    return APIResponse.success(attempt.to_dict())


@router.get("/users/{user_id}/attempts")
async def list_user_attempts(user_id: str, services: ServiceContainer = Depends(get_services)):
    attempts = await services.attempts.by_user(user_id)
    return APIResponse.success([a.to_dict() for a in attempts])


@router.get("/users/{user_id}/exams/{exam_id}/active-attempt")
async def get_active_attempt(
    user_id: str,
    exam_id: str,
    services: ServiceContainer = Depends(get_services)
):
    attempt = await services.attempts.active_attempt(user_id, exam_id)
    return APIResponse.success(attempt.to_dict() if attempt else None)

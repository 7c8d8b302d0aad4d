"""
Practice Router

Endpoints for drawing and scoring topic-based practice tests.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer
from learnportal.services.practice import DEFAULT_QUESTION_COUNT

router = APIRouter()


class CreatePracticeTestRequest(BaseModel):
    topic_ids: List[str]
    question_count: int = Field(DEFAULT_QUESTION_COUNT, description="Number of questions, capped at 50")
    level: str = Field("all", description="Topic level to draw from, or 'all'")


class SubmitPracticeTestRequest(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict, description="Question id to selected option index")


@router.get("/practice/topics")
async def practice_topics(services: ServiceContainer = Depends(get_services)):
    topics = await services.practice.available_topics()
    return APIResponse.success([t.to_dict() for t in topics])


@router.post("/practice-tests", status_code=201)
async def create_practice_test(body: CreatePracticeTestRequest, services: ServiceContainer = Depends(get_services)):
    practice_test = await services.practice.create(body.topic_ids, body.question_count, body.level)
    return APIResponse.success(practice_test.to_dict(), "Practice test created")


@router.post("/practice-tests/{practice_test_id}/submit")
async def submit_practice_test(
    practice_test_id: str,
    body: SubmitPracticeTestRequest,
    services: ServiceContainer = Depends(get_services)
):
    result = await services.practice.submit(practice_test_id, body.answers)
    return APIResponse.success(result.to_dict(), "Practice test scored")

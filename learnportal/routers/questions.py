"""
Questions Router

Endpoints for editing questions and managing their topic tags.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer

router = APIRouter()


class UpdateQuestionRequest(BaseModel):
    text: str
    options: List[str]
    correct_option: int
    points: int


class SetTopicsRequest(BaseModel):
    topic_ids: List[str]


@router.get("/questions/{question_id}")
async def get_question(question_id: str, services: ServiceContainer = Depends(get_services)):
    question = await services.question_bank.find_by_id(question_id)
    return APIResponse.success(question.to_dict())


@router.put("/questions/{question_id}")
async def update_question(
    question_id: str,
    body: UpdateQuestionRequest,
    services: ServiceContainer = Depends(get_services)
):
    question = await services.question_bank.update_question(
        question_id, body.text, body.options, body.correct_option, body.points
    )
    return APIResponse.success(question.to_dict(), "Question updated")


@router.post("/questions/{question_id}/activate")
async def activate_question(question_id: str, services: ServiceContainer = Depends(get_services)):
    question = await services.question_bank.activate(question_id)
    return APIResponse.success(question.to_dict(), "Question activated")


@router.post("/questions/{question_id}/deactivate")
async def deactivate_question(question_id: str, services: ServiceContainer = Depends(get_services)):
    question = await services.question_bank.deactivate(question_id)
    return APIResponse.success(question.to_dict(), "Question deactivated")


@router.delete("/questions/{question_id}")
async def delete_question(question_id: str, services: ServiceContainer = Depends(get_services)):
    question = await services.question_bank.delete_question(question_id)
    return APIResponse.success(question.to_dict(), "Question deleted")


@router.get("/questions/{question_id}/topics")
async def get_question_topics(question_id: str, services: ServiceContainer = Depends(get_services)):
    topic_ids = await services.topic_tagger.topics_for(question_id)
    return APIResponse.success({"question_id": question_id, "topic_ids": topic_ids})


@router.put("/questions/{question_id}/topics")
async def set_question_topics(
    question_id: str,
    body: SetTopicsRequest,
    services: ServiceContainer = Depends(get_services)
):
    topic_ids = await services.topic_tagger.set_topics(question_id, body.topic_ids)
    return APIResponse.success({"question_id": question_id, "topic_ids": topic_ids}, "Topics updated")


@router.delete("/questions/{question_id}/topics")
async def clear_question_topics(question_id: str, services: ServiceContainer = Depends(get_services)):
    removed = await services.topic_tagger.clear_topics(question_id)
    return APIResponse.success({"question_id": question_id, "removed": removed}, "Topics cleared")


@router.post("/questions/{question_id}/topics/{topic_id}")
async def associate_topic(
    question_id: str,
    topic_id: str,
    services: ServiceContainer = Depends(get_services)
):
    created = await services.topic_tagger.associate(question_id, topic_id)
    message = "Topic associated" if created else "Topic already associated"
    return APIResponse.success({"question_id": question_id, "topic_id": topic_id, "created": created}, message)


@router.delete("/questions/{question_id}/topics/{topic_id}")
async def disassociate_topic(
    question_id: str,
    topic_id: str,
    services: ServiceContainer = Depends(get_services)
):
    removed = await services.topic_tagger.disassociate(question_id, topic_id)
    message = "Topic disassociated" if removed else "Topic was not associated"
    return APIResponse.success({"question_id": question_id, "topic_id": topic_id, "removed": removed}, message)


@router.get("/topics/{topic_id}/questions")
async def get_topic_questions(topic_id: str, services: ServiceContainer = Depends(get_services)):
    """Active questions tagged with a topic, answer keys included (admin view)."""
    questions = await services.topic_tagger.active_questions_for(topic_id)
    return APIResponse.success([q.to_dict() for q in questions])

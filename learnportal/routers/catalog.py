"""
Catalog Router

Endpoints for administering exams, topics and the questions of an exam.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer

router = APIRouter()


class CreateTopicRequest(BaseModel):
    title: str
    description: str = ""
    level: str = "beginner"


class UpdateTopicRequest(BaseModel):
    title: str
    description: str = ""
    level: str


class CreateExamRequest(BaseModel):
    title: str
    description: str = ""
    duration_minutes: int = Field(60, description="Advisory time limit in minutes (1-480)")
    passing_score_percentage: int = Field(70, description="Minimum passing percentage (0-100)")
    topic_id: Optional[str] = None


class UpdateExamRequest(BaseModel):
    title: str
    description: str = ""
    duration_minutes: int
    passing_score_percentage: int


class CreateQuestionRequest(BaseModel):
    text: str
    question_type: str = "multiple_choice"
    options: List[str]
    correct_option: int
    points: int = 1


@router.post("/topics", status_code=201)
async def create_topic(body: CreateTopicRequest, services: ServiceContainer = Depends(get_services)):
    topic = await services.catalog.create_topic(body.title, body.description, body.level)
    return APIResponse.success(topic.to_dict(), "Topic created")


@router.get("/topics")
async def list_topics(
    active_only: bool = Query(False),
    services: ServiceContainer = Depends(get_services)
):
    topics = await services.catalog.list_topics(active_only=active_only)
    return APIResponse.success([t.to_dict() for t in topics])


@router.get("/topics/{topic_id}")
async def get_topic(topic_id: str, services: ServiceContainer = Depends(get_services)):
    topic = await services.catalog.get_topic(topic_id)
    return APIResponse.success(topic.to_dict())


@router.put("/topics/{topic_id}")
async def update_topic(
    topic_id: str,
    body: UpdateTopicRequest,
    services: ServiceContainer = Depends(get_services)
):
    topic = await services.catalog.update_topic(topic_id, body.title, body.description, body.level)
    return APIResponse.success(topic.to_dict(), "Topic updated")


@router.delete("/topics/{topic_id}")
async def delete_topic(topic_id: str, services: ServiceContainer = Depends(get_services)):
    topic = await services.catalog.delete_topic(topic_id)
    return APIResponse.success(topic.to_dict(), "Topic deleted")


@router.post("/topics/{topic_id}/activate")
async def activate_topic(topic_id: str, services: ServiceContainer = Depends(get_services)):
    topic = await services.catalog.activate_topic(topic_id)
    return APIResponse.success(topic.to_dict(), "Topic activated")


@router.post("/topics/{topic_id}/deactivate")
async def deactivate_topic(topic_id: str, services: ServiceContainer = Depends(get_services)):
    topic = await services.catalog.deactivate_topic(topic_id)
    return APIResponse.success(topic.to_dict(), "Topic deactivated")


@router.post("/exams", status_code=201)
async def create_exam(body: CreateExamRequest, services: ServiceContainer = Depends(get_services)):
    exam = await services.catalog.create_exam(
        title=body.title,
        description=body.description,
        duration_minutes=body.duration_minutes,
        passing_score_percentage=body.passing_score_percentage,
        topic_id=body.topic_id
    )
    return APIResponse.success(exam.to_dict(), "Exam created")


@router.get("/exams")
async def list_exams(
    active_only: bool = Query(False),
    services: ServiceContainer = Depends(get_services)
):
    exams = await services.catalog.list_exams(active_only=active_only)
    return APIResponse.success([e.to_dict() for e in exams])


@router.get("/exams/{exam_id}")
async def get_exam(exam_id: str, services: ServiceContainer = Depends(get_services)):
    exam = await services.catalog.get_exam(exam_id)
    return APIResponse.success(exam.to_dict())


@router.put("/exams/{exam_id}")
async def update_exam(
    exam_id: str,
    body: UpdateExamRequest,
    services: ServiceContainer = Depends(get_services)
):
    exam = await services.catalog.update_exam(
        exam_id,
        title=body.title,
        description=body.description,
        duration_minutes=body.duration_minutes,
        passing_score_percentage=body.passing_score_percentage
    )
    return APIResponse.success(exam.to_dict(), "Exam updated")


@router.delete("/exams/{exam_id}")
async def delete_exam(exam_id: str, services: ServiceContainer = Depends(get_services)):
    exam = await services.catalog.delete_exam(exam_id)
    return APIResponse.success(exam.to_dict(), "Exam deleted")


@router.post("/exams/{exam_id}/activate")
async def activate_exam(exam_id: str, services: ServiceContainer = Depends(get_services)):
    exam = await services.catalog.activate_exam(exam_id)
    return APIResponse.success(exam.to_dict(), "Exam activated")


@router.post("/exams/{exam_id}/deactivate")
async def deactivate_exam(exam_id: str, services: ServiceContainer = Depends(get_services)):
    exam = await services.catalog.deactivate_exam(exam_id)
    return APIResponse.success(exam.to_dict(), "Exam deactivated")


@router.post("/exams/{exam_id}/questions", status_code=201)
async def create_question(
    exam_id: str,
    body: CreateQuestionRequest,
    services: ServiceContainer = Depends(get_services)
):
    question = await services.question_bank.create_question(
        text=body.text,
        question_type=body.question_type,
        exam_id=exam_id,
        options=body.options,
        correct_option=body.correct_option,
        points=body.points
    )
    return APIResponse.success(question.to_dict(), "Question created")


@router.get("/exams/{exam_id}/questions")
async def list_exam_questions(exam_id: str, services: ServiceContainer = Depends(get_services)):
    """Active questions of an exam, answer keys included (admin view)."""
    questions = await services.question_bank.find_by_exam(exam_id)
    return APIResponse.success([q.to_dict() for q in questions])

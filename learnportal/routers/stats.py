"""
Statistics Router
"""

from fastapi import APIRouter, Depends

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer

router = APIRouter()


@router.get("/stats/learning")
async def learning_statistics(services: ServiceContainer = Depends(get_services)):
    return APIResponse.success(await services.stats.learning_statistics())


@router.get("/stats/exams/{exam_id}")
async def exam_statistics(exam_id: str, services: ServiceContainer = Depends(get_services)):
    return APIResponse.success(await services.stats.exam_statistics(exam_id))


@router.get("/stats/users/{user_id}/assignments")
async def assignment_statistics(user_id: str, services: ServiceContainer = Depends(get_services)):
    return APIResponse.success(await services.stats.assignment_statistics(user_id))


@router.get("/stats/users/{user_id}/attempts")
async def attempt_statistics(user_id: str, services: ServiceContainer = Depends(get_services)):
    return APIResponse.success(await services.stats.user_attempt_statistics(user_id))

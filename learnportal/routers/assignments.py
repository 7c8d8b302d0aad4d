"""
Assignments Router

Endpoints for assigning exams to users and tracking completion.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from learnportal.api import APIResponse, get_services
from learnportal.container import ServiceContainer

router = APIRouter()


class AssignmentStatus(str, Enum):
    ALL = "all"
    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class AssignExamRequest(BaseModel):
    user_id: str
    exam_id: str
    assigned_by: str
    due_date: Optional[datetime] = None


class UpdateDueDateRequest(BaseModel):
    due_date: Optional[datetime] = None


@router.post("/assignments", status_code=201)
async def assign_exam(body: AssignExamRequest, services: ServiceContainer = Depends(get_services)):
    assignment = await services.assignments.assign(
        body.user_id, body.exam_id, body.assigned_by, body.due_date
    )
    return APIResponse.success(assignment.to_dict(services.assignments.clock()), "Exam assigned")


@router.get("/assignments/{assignment_id}")
async def get_assignment(assignment_id: str, services: ServiceContainer = Depends(get_services)):
    assignment = await services.assignments.find_by_id(assignment_id)
    return APIResponse.success(assignment.to_dict(services.assignments.clock()))


@router.post("/assignments/{assignment_id}/complete")
async def complete_assignment(assignment_id: str, services: ServiceContainer = Depends(get_services)):
    assignment = await services.assignments.mark_completed(assignment_id)
    return APIResponse.success(assignment.to_dict(services.assignments.clock()), "Assignment completed")


@router.patch("/assignments/{assignment_id}/due-date")
async def update_due_date(
    assignment_id: str,
    body: UpdateDueDateRequest,
    services: ServiceContainer = Depends(get_services)
):
    assignment = await services.assignments.update_due_date(assignment_id, body.due_date)
    return APIResponse.success(assignment.to_dict(services.assignments.clock()), "Due date updated")


@router.delete("/assignments/{assignment_id}")
async def delete_assignment(assignment_id: str, services: ServiceContainer = Depends(get_services)):
    await services.assignments.delete(assignment_id)
    return APIResponse.success({"id": assignment_id}, "Assignment deleted")


@router.post("/assignments/{assignment_id}/restore")
async def restore_assignment(assignment_id: str, services: ServiceContainer = Depends(get_services)):
    assignment = await services.assignments.restore(assignment_id)
    return APIResponse.success(assignment.to_dict(services.assignments.clock()), "Assignment restored")


@router.get("/users/{user_id}/assignments")
async def list_user_assignments(
    user_id: str,
    status: AssignmentStatus = Query(AssignmentStatus.ALL),
    services: ServiceContainer = Depends(get_services)
):
    finders = {
        AssignmentStatus.ALL: services.assignments.by_user,
        AssignmentStatus.PENDING: services.assignments.pending_by_user,
        AssignmentStatus.OVERDUE: services.assignments.overdue_by_user,
        AssignmentStatus.COMPLETED: services.assignments.completed_by_user,
    }
    assignments = await finders[status](user_id)
    now = services.assignments.clock()
    return APIResponse.success([a.to_dict(now) for a in assignments])


@router.get("/exams/{exam_id}/assignments")
async def list_exam_assignments(exam_id: str, services: ServiceContainer = Depends(get_services)):
    assignments = await services.assignments.by_exam(exam_id)
    now = services.assignments.clock()
    return APIResponse.success([a.to_dict(now) for a in assignments])

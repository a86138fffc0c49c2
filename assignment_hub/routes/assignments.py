# FILE: assignment_hub/routes/assignments.py
"""
Assignment endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends

from assignment_hub.dependencies import get_assignment_service
from assignment_hub.models.assignments import (
    AnswersRequest,
    Assignment,
    AssignmentStatus,
    CommentRequest,
    GenerateAssignmentRequest,
)
from assignment_hub.services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)
router = APIRouter()


def _present(assignment: Assignment) -> dict:
    return {"id": assignment.id, **assignment.to_record()}


@router.post("/generate")
async def generate_assignment(
    request: GenerateAssignmentRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """
    Generate an assignment for a student.

    Example request:
    POST /assignments/generate
    {
        "student_id": "stu_1",
        "criteria": {
            "subject": "Math", "topics": "Fractions, Decimals",
            "purpose": "Practice", "difficulty": "Medium",
            "format": ["MCQ", "Short Answer"], "numQuestions": 10
        }
    }
    """
    logger.info(f"Generate assignment: student={request.student_id}")

    assignment = await service.generate_assignment(
        student_id=request.student_id,
        criteria=request.criteria,
        parent_id=request.parent_id
    )

    return {
        "status": "success",
        "assignment_id": assignment.id,
        "assignment": _present(assignment)
    }


@router.get("")
async def list_assignments(
    student_id: Optional[str] = None,
    parent_id: Optional[str] = None,
    subject: Optional[str] = None,
    status: Optional[AssignmentStatus] = None,
    service: AssignmentService = Depends(get_assignment_service)
):
    """List assignments, newest first"""
    assignments = await service.list_assignments(
        student_id=student_id,
        parent_id=parent_id,
        subject=subject,
        status=status
    )
    return {
        "status": "success",
        "count": len(assignments),
        "assignments": [_present(a) for a in assignments]
    }


@router.get("/{assignment_id}")
async def get_assignment(
    assignment_id: str,
    service: AssignmentService = Depends(get_assignment_service)
):
    assignment = await service.get_assignment(assignment_id)
    return {"status": "success", "assignment": _present(assignment)}


@router.post("/{assignment_id}/start")
async def start_assignment(
    assignment_id: str,
    service: AssignmentService = Depends(get_assignment_service)
):
    assignment = await service.start_assignment(assignment_id)
    return {"status": "success", "assignment": _present(assignment)}


@router.post("/{assignment_id}/progress")
async def save_progress(
    assignment_id: str,
    request: AnswersRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Save answers without grading"""
    assignment = await service.save_progress(
        assignment_id,
        answers=request.answers,
        expected_version=request.expected_version
    )
    return {
        "status": "success",
        "version": assignment.version,
        "assignment": _present(assignment)
    }


@router.post("/{assignment_id}/submit")
async def submit_assignment(
    assignment_id: str,
    request: AnswersRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    """Grade answers and complete the assignment"""
    logger.info(f"Submit assignment: {assignment_id}")

    assignment = await service.submit_answers(
        assignment_id,
        answers=request.answers,
        expected_version=request.expected_version
    )
    return {
        "status": "success",
        "score": assignment.score,
        "ai_suggestion": assignment.ai_suggestion,
        "assignment": _present(assignment)
    }


@router.post("/{assignment_id}/comment")
async def add_comment(
    assignment_id: str,
    request: CommentRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    assignment = await service.add_parent_comment(assignment_id, request.comment)
    return {"status": "success", "assignment": _present(assignment)}

# FILE: assignment_hub/routes/topics.py
"""
Topic suggestion endpoints
"""
import logging
from fastapi import APIRouter, Depends

from assignment_hub.agent.steps.topics import TopicAdvisor
from assignment_hub.dependencies import get_assignment_service, get_topic_advisor
from assignment_hub.models.assignments import TopicRequest
from assignment_hub.services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/suggest")
async def suggest_topics(
    request: TopicRequest,
    service: AssignmentService = Depends(get_assignment_service),
    advisor: TopicAdvisor = Depends(get_topic_advisor)
):
    """Topic names for a parent building an assignment"""
    student = await service.load_student(request.student_id)
    topics = await advisor.suggest_topics(student, request.subject)
    return {
        "status": "success",
        "subject": request.subject,
        "topics": topics
    }


@router.post("/explore")
async def explore_topics(
    request: TopicRequest,
    service: AssignmentService = Depends(get_assignment_service),
    advisor: TopicAdvisor = Depends(get_topic_advisor)
):
    """Topics with a short explanation, example and tip for a student"""
    student = await service.load_student(request.student_id)
    insights = await advisor.explore_topics(student, request.subject)
    return {
        "status": "success",
        "subject": request.subject,
        "topics": [i.model_dump(by_alias=True) for i in insights]
    }

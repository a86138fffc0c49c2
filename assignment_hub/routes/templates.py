# FILE: assignment_hub/routes/templates.py
"""
Assignment template endpoints
"""
from fastapi import APIRouter, Depends

from assignment_hub.dependencies import get_template_service
from assignment_hub.models.assignments import TemplateCreateRequest
from assignment_hub.services.assignment_service import TemplateService

router = APIRouter()


@router.post("")
async def save_template(
    request: TemplateCreateRequest,
    service: TemplateService = Depends(get_template_service)
):
    template = await service.save_template(request.parent_id, request.name, request.criteria)
    return {
        "status": "success",
        "template": template.model_dump(by_alias=True, mode="json")
    }


@router.get("")
async def list_templates(
    parent_id: str,
    service: TemplateService = Depends(get_template_service)
):
    templates = await service.list_templates(parent_id)
    return {
        "status": "success",
        "count": len(templates),
        "templates": [t.model_dump(by_alias=True, mode="json") for t in templates]
    }

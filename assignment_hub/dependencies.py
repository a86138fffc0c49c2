# FILE: assignment_hub/dependencies.py
"""
FastAPI dependency wiring

The only place settings are read from the environment; everything below it
receives them explicitly. Tests swap pieces through app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends

from assignment_hub.agent.steps.assignment_assembler import AssignmentAssembler
from assignment_hub.agent.steps.feedback import FeedbackRequester
from assignment_hub.agent.steps.topics import TopicAdvisor
from assignment_hub.config import Settings, get_settings
from assignment_hub.providers.registry import ProviderRegistry, get_provider_registry
from assignment_hub.services.assignment_service import AssignmentService, TemplateService
from assignment_hub.services.document_store import DocumentStore, create_document_store

_store: Optional[DocumentStore] = None


def get_app_settings() -> Settings:
    return get_settings()


def get_document_store() -> DocumentStore:
    """Get or create the process-wide document store"""
    global _store
    if _store is None:
        settings = get_settings()
        _store = create_document_store(settings.store_backend, settings.data_dir)
    return _store


def get_registry() -> ProviderRegistry:
    return get_provider_registry()


def get_assignment_service(
    store: DocumentStore = Depends(get_document_store),
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> AssignmentService:
    return AssignmentService(
        store=store,
        assembler=AssignmentAssembler(store, registry, settings),
        feedback=FeedbackRequester(registry, settings),
        settings=settings,
    )


def get_template_service(store: DocumentStore = Depends(get_document_store)) -> TemplateService:
    return TemplateService(store)


def get_topic_advisor(
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> TopicAdvisor:
    return TopicAdvisor(registry, settings)

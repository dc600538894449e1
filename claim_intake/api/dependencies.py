"""FastAPI dependencies resolving services from the application container."""

from fastapi import Request

from ..domain.services.message_router import MessageRouter
from ..infrastructure.dependencies import ServiceContainer
from ..infrastructure.settings import IntakeSettings


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the service container."""
    return request.app.state.container


def get_settings(request: Request) -> IntakeSettings:
    """FastAPI dependency for service settings."""
    return get_container(request).settings


def get_message_router(request: Request) -> MessageRouter:
    """FastAPI dependency for the message router."""
    return get_container(request).router

"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from budgetwise.infrastructure.clients.advisor import AdvisorClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_advisor_client() -> AdvisorClient:
    """Provide AI advisor client instance"""
    return AdvisorClient()

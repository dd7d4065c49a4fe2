"""Web API layer."""

from hilal.api.app import create_app
from hilal.api.dependencies import get_app_state

__all__ = ["create_app", "get_app_state"]

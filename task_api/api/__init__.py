# API module exports
from task_api.api.base import api_router

__all__ = ["api_router"]

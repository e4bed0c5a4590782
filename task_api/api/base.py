from fastapi import APIRouter
from task_api.features import tasks

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(tasks.router)

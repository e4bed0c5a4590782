import logging

from task_api import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

import asyncio  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

import uvicorn  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import PlainTextResponse  # noqa: E402

from task_api.api.base import api_router  # noqa: E402
from task_api.db import dispose_engine, init_db  # noqa: E402
from task_api.errors import register_exception_handlers  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engine()


app = FastAPI(
    title="Task Manager API",
    description="Personal task management with filtering, pagination and dashboards",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all API routes
app.include_router(api_router)


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Task Management API"


def run() -> None:
    """Serve the API on HOST:PORT"""
    logger.info(f"Server running on port {config.PORT}")
    uvicorn.run(app, host=config.HOST, port=config.PORT)


async def _create_tables() -> None:
    try:
        await init_db()
    finally:
        await dispose_engine()


def create_tables() -> None:
    """Create the tasks table if it does not exist"""
    asyncio.run(_create_tables())

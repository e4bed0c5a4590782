import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Connection pool configuration
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))  # Default 5 connections
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))  # Default 10 overflow
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))  # Default 30 seconds
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))  # Default 1 hour

# Token verification
AUTH_JWKS_URL: Optional[str] = os.getenv("AUTH_JWKS_URL")
AUTH_ISSUER: Optional[str] = os.getenv("AUTH_ISSUER")
AUTH_AUDIENCE: Optional[str] = os.getenv("AUTH_AUDIENCE")


def get_database_url() -> str:
    """
    Get the async SQLAlchemy URL for the task store.

    Accepts the plain PostgreSQL connection string format:
    postgresql://user:[PASSWORD]@[HOST]:[PORT]/dbname
    and rewrites it to the psycopg async driver.
    """
    database_url = os.getenv("DATABASE_URL")

    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+psycopg://", 1)
    if database_url.startswith("postgresql+psycopg://"):
        return database_url
    if database_url.startswith("postgresql+asyncpg://"):
        # Legacy support: convert asyncpg URLs to psycopg
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)

    raise ValueError(f"Unsupported database URL format: {database_url}")

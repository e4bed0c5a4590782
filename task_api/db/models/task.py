"""SQLAlchemy ORM model for tasks table"""

from sqlalchemy import Column, DateTime, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql import func

from task_api.db.base import Base


class Task(Base):
    """
    SQLAlchemy ORM model for the tasks table.
    Status and priority are stored as plain strings; the API layer
    validates them against TaskStatus / TaskPriority.
    """
    __tablename__ = "tasks"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Owner (caller id from the auth token's sub claim)
    user_id = Column(String, nullable=False, index=True)

    # Task information
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="To Do", server_default="To Do")
    priority = Column(String, nullable=False, default="Medium", server_default="Medium")
    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    categories = Column(
        ARRAY(String),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
    )

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"

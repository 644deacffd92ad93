# smarttask/models/task.py
import uuid
from typing import Optional
from datetime import datetime

from utils.datetime_utils import utc_now
from sqlmodel import SQLModel, Field

class Task(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str
    description: str = ""
    deadline: Optional[datetime] = Field(default=None, index=True)  # stored as UTC
    parent_id: Optional[uuid.UUID] = Field(default=None, foreign_key="task.id", index=True)
    position: int = 0             # order inside the parent's subtasks
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

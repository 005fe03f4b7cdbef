from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class ProgressUpdate(BaseModel):
    completed: bool = Field(..., description="Explicit completion signal for the lesson")

class ProgressDisplay(BaseModel):
    id: int
    user_id: int
    lesson_id: int
    completed: bool
    watch_time: int = Field(..., ge=0, description="Cumulative seconds from closed lesson activities")
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProgressWithLesson(ProgressDisplay):
    """Progress row with the titles along the lesson -> discipline -> course chain."""
    lesson_title: Optional[str] = None
    discipline_title: Optional[str] = None
    course_title: Optional[str] = None

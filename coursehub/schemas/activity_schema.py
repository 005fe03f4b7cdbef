from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from coursehub.models.enums import ActivityType

class ActivityStart(BaseModel):
    type: ActivityType = Field(..., description="LESSON or QUIZ")
    resource_id: int = Field(..., description="Lesson or quiz id the session is about")

class ActivityEnd(BaseModel):
    completion_status: Optional[str] = Field(None, description="'completed' marks the lesson done; any other value leaves it not completed")

class ActivityDisplay(BaseModel):
    id: int
    user_id: int
    type: ActivityType
    resource_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    time_spent: Optional[int] = Field(None, description="Whole seconds, set once the activity is closed")

    class Config:
        from_attributes = True

class ActivityTimeTotal(BaseModel):
    total_time: int = Field(..., ge=0, description="Seconds across all closed activities")

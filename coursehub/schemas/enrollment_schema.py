from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class EnrollmentDisplay(BaseModel):
    id: int
    user_id: int
    course_id: int
    completed_time: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

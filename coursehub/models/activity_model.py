import math
from datetime import timezone

from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship

from coursehub.core.database import Base
from coursehub.models.enums import ActivityType

def as_utc(value):
    """SQLite hands back naive datetimes; every timestamp we store is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(ActivityType, name="activity_type_enum", values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    resource_id = Column(Integer, nullable=False) # Lesson or quiz id; not a FK, validated on close
    start_time = Column(TIMESTAMP(timezone=True), nullable=False)
    end_time = Column(TIMESTAMP(timezone=True), nullable=True) # NULL while the session is open

    user = relationship("User", back_populates="activities")

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def time_spent(self):
        """Whole seconds between start and end, None while open."""
        if self.end_time is None:
            return None
        elapsed = (as_utc(self.end_time) - as_utc(self.start_time)).total_seconds()
        return max(0, math.floor(elapsed))

    def __repr__(self):
        return f"<Activity(id={self.id}, user_id={self.user_id}, type='{self.type}', resource_id={self.resource_id}, open={self.is_open})>"

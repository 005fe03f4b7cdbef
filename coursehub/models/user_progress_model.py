from sqlalchemy import Column, Integer, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursehub.core.database import Base

class Progress(Base):
    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)

    completed = Column(Boolean, nullable=False, default=False)
    watch_time = Column(Integer, nullable=False, default=0) # Seconds; only ever incremented

    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="progress_entries")
    lesson = relationship("Lesson", back_populates="progress_entries")

    # Target of the ON CONFLICT upsert in the progress aggregator
    __table_args__ = (
        UniqueConstraint('user_id', 'lesson_id', name='uq_user_lesson_progress'),
    )

    def __repr__(self):
        return f"<Progress(id={self.id}, user_id={self.user_id}, lesson_id={self.lesson_id}, watch_time={self.watch_time}, completed={self.completed})>"

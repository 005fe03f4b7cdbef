from sqlalchemy import Column, Integer, Float, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursehub.core.database import Base, JSONEncodedList

class QuizResult(Base):
    __tablename__ = "quiz_results"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)

    score = Column(Float, nullable=False) # 0-100
    answers = Column(JSONEncodedList, nullable=False, default=list) # Selected option index per question
    time_spent = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True)

    # Relationships
    user = relationship("User", back_populates="quiz_results")
    quiz = relationship("Quiz", back_populates="results")

    def __repr__(self):
        return f"<QuizResult(id={self.id}, user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score})>"

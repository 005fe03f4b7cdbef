from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, TIMESTAMP, BigInteger,
    Enum as SAEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from coursehub.core.database import Base, JSONEncodedList
from coursehub.models.enums import ContentType

class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    disciplines = relationship("Discipline", back_populates="course", cascade="all, delete-orphan", order_by="Discipline.order")
    quizzes = relationship("Quiz", back_populates="course", cascade="all, delete-orphan", order_by="Quiz.code")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Course(id={self.id}, code='{self.code}', title='{self.title}')>"

class Discipline(Base):
    __tablename__ = "disciplines"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0) # max+1 on insert, see crud

    # Relationships
    course = relationship("Course", back_populates="disciplines")
    lessons = relationship("Lesson", back_populates="discipline", cascade="all, delete-orphan", order_by="Lesson.order")

    def __repr__(self):
        return f"<Discipline(id={self.id}, title='{self.title}', course_id={self.course_id})>"

class Content(Base):
    __tablename__ = "contents"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(SAEnum(ContentType, name="content_type_enum", values_callable=lambda obj: [e.value for e in obj]), nullable=False)
    url = Column(String(512), nullable=False) # /uploads/<category>/<filename>
    filename = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(BigInteger, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    lesson = relationship("Lesson", back_populates="content", uselist=False)

    def __repr__(self):
        return f"<Content(id={self.id}, type='{self.type}', filename='{self.filename}')>"

class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    discipline_id = Column(Integer, ForeignKey("disciplines.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=1)
    # At most one Content per lesson; replacing it removes the previous record
    content_id = Column(Integer, ForeignKey("contents.id", ondelete="SET NULL"), unique=True, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    discipline = relationship("Discipline", back_populates="lessons")
    content = relationship("Content", back_populates="lesson")
    progress_entries = relationship("Progress", back_populates="lesson", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Lesson(id={self.id}, title='{self.title}', discipline_id={self.discipline_id})>"

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="quizzes")
    questions = relationship("Question", back_populates="quiz", cascade="all, delete-orphan", order_by="Question.position")
    results = relationship("QuizResult", back_populates="quiz", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Quiz(id={self.id}, code='{self.code}', course_id={self.course_id})>"

class Question(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0) # Grading is position-wise
    text = Column(Text, nullable=False)
    options = Column(JSONEncodedList, nullable=False, default=list) # Ordered list of option strings
    answer = Column(Integer, nullable=False) # Index into options

    # Relationships
    quiz = relationship("Quiz", back_populates="questions")

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, position={self.position})>"

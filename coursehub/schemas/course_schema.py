from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from coursehub.models.enums import ContentType

# --- Content Schemas ---
class ContentDisplay(BaseModel):
    id: int
    type: ContentType
    url: str
    filename: str
    mime_type: Optional[str] = None
    size: Optional[int] = None

    class Config:
        from_attributes = True

# --- Lesson Schemas ---
# Lessons are created from multipart forms (see lesson routes), so only the display schema lives here.
class LessonDisplay(BaseModel):
    id: int
    discipline_id: int
    title: str
    description: Optional[str] = None
    order: int
    content: Optional[ContentDisplay] = None

    class Config:
        from_attributes = True

# --- Discipline Schemas ---
class DisciplineBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Title of the discipline")
    description: Optional[str] = Field(None, description="Description of the discipline")

class DisciplineCreate(DisciplineBase):
    pass # order is assigned as max(order)+1 within the course

class DisciplineUpdate(DisciplineBase):
    pass

class DisciplineDisplay(DisciplineBase):
    id: int
    course_id: int
    order: int
    lessons: List[LessonDisplay] = []

    class Config:
        from_attributes = True

# --- Question Schemas ---
class QuestionBase(BaseModel):
    text: str = Field(..., min_length=1, description="The text of the question")
    options: List[str] = Field(..., min_length=2, description="Ordered answer options")

class QuestionCreate(QuestionBase):
    answer: int = Field(..., ge=0, description="Index of the correct option")

    @model_validator(mode="after")
    def check_answer_in_options(self):
        if self.answer >= len(self.options):
            raise ValueError("answer must be the index of one of the options")
        return self

class QuestionPublic(QuestionBase):
    """Question as shown to students: no answer key."""
    id: int
    position: int

    class Config:
        from_attributes = True

class QuestionDisplay(QuestionPublic):
    answer: int

# --- Quiz Schemas ---
class QuizBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Title of the quiz")
    code: str = Field(..., min_length=1, max_length=50, description="Unique quiz code")
    description: Optional[str] = Field(None, max_length=2000)

class QuizCreate(QuizBase):
    questions: List[QuestionCreate] = Field(default_factory=list, description="Questions in display/grading order")

class QuizUpdate(QuizCreate):
    pass # Questions are replaced wholesale on update

class QuizPublic(QuizBase):
    id: int
    course_id: int
    questions: List[QuestionPublic] = []

    class Config:
        from_attributes = True

class QuizDisplay(QuizPublic):
    questions: List[QuestionDisplay] = []

# --- Course Schemas ---
class CourseBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=50, description="Unique course code")
    title: str = Field(..., min_length=1, max_length=255, description="Title of the course")
    description: Optional[str] = Field(None, description="Detailed description of the course")

    @field_validator("code", "title")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

class CourseCreate(CourseBase):
    pass

class CourseUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None

class CoursePublic(CourseBase):
    id: int

    class Config:
        from_attributes = True

class CourseDisplay(CoursePublic):
    disciplines: List[DisciplineDisplay] = []
    quizzes: List[QuizDisplay] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

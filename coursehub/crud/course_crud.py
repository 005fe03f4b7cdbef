from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import func
from typing import List, Optional
import logging

from coursehub.core.exceptions import ConflictError, NotFoundError
from coursehub.models.course_model import (
    Course, Discipline, Lesson, Quiz, Question
)
from coursehub.schemas import course_schema as schemas

logger = logging.getLogger(__name__)

# Helper function for updating entities
def update_db_object(db_obj, update_data: schemas.BaseModel):
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(db_obj, field, value)
    return db_obj

# --- Course CRUD ---
def get_course_by_code(db: Session, code: str) -> Optional[Course]:
    return db.query(Course).filter(Course.code == code).first()

def create_course(db: Session, course_in: schemas.CourseCreate) -> Course:
    logger.debug(f"Creating course '{course_in.code}' titled '{course_in.title}'")
    if get_course_by_code(db, course_in.code):
        logger.warning(f"Course code '{course_in.code}' already exists.")
        raise ConflictError("A course with this code already exists.")

    db_course = Course(**course_in.model_dump())
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    logger.info(f"Course '{db_course.title}' (ID: {db_course.id}) created successfully.")
    return db_course

def get_course(db: Session, course_id: int) -> Optional[Course]:
    logger.debug(f"Fetching course with ID: {course_id}")
    return db.query(Course).filter(Course.id == course_id).first()

def get_courses(db: Session, skip: int = 0, limit: int = 100) -> List[Course]:
    logger.debug(f"Fetching courses with skip: {skip}, limit: {limit}")
    return (
        db.query(Course)
        .options(
            selectinload(Course.disciplines).selectinload(Discipline.lessons).joinedload(Lesson.content),
            selectinload(Course.quizzes).selectinload(Quiz.questions),
        )
        .order_by(Course.id)
        .offset(skip)
        .limit(limit)
        .all()
    )

def update_course(db: Session, course_id: int, course_in: schemas.CourseUpdate) -> Optional[Course]:
    db_course = get_course(db, course_id)
    if not db_course:
        logger.warning(f"Course with ID {course_id} not found for update.")
        return None

    if course_in.code and course_in.code != db_course.code and get_course_by_code(db, course_in.code):
        raise ConflictError("A course with this code already exists.")

    logger.debug(f"Updating course ID: {course_id} with data: {course_in.model_dump(exclude_unset=True)}")
    db_course = update_db_object(db_course, course_in)

    db.commit()
    db.refresh(db_course)
    logger.info(f"Course '{db_course.title}' (ID: {db_course.id}) updated successfully.")
    return db_course

def delete_course(db: Session, course_id: int) -> bool:
    db_course = get_course(db, course_id)
    if not db_course:
        logger.warning(f"Course with ID {course_id} not found for deletion.")
        return False

    logger.debug(f"Deleting course ID: {course_id} ('{db_course.title}')")
    db.delete(db_course)
    db.commit()
    logger.info(f"Course ID: {course_id} ('{db_course.title}') deleted successfully.")
    return True

# --- Discipline CRUD ---
def create_discipline(db: Session, discipline_in: schemas.DisciplineCreate, course_id: int) -> Discipline:
    logger.debug(f"Creating discipline '{discipline_in.title}' for course_id {course_id}")
    if not get_course(db, course_id):
        logger.error(f"Course with ID {course_id} not found. Cannot create discipline.")
        raise NotFoundError(f"Course with ID {course_id} not found.")

    # New disciplines go last: max(order) + 1, starting at 0
    last_order = db.query(func.max(Discipline.order)).filter(Discipline.course_id == course_id).scalar()
    new_order = last_order + 1 if last_order is not None else 0

    db_discipline = Discipline(**discipline_in.model_dump(), course_id=course_id, order=new_order)
    db.add(db_discipline)
    db.commit()
    db.refresh(db_discipline)
    logger.info(f"Discipline '{db_discipline.title}' (ID: {db_discipline.id}, order {new_order}) created for course ID {course_id}.")
    return db_discipline

def get_discipline(db: Session, discipline_id: int) -> Optional[Discipline]:
    return db.query(Discipline).filter(Discipline.id == discipline_id).first()

def update_discipline(db: Session, discipline_id: int, discipline_in: schemas.DisciplineUpdate) -> Optional[Discipline]:
    db_discipline = get_discipline(db, discipline_id)
    if not db_discipline:
        logger.warning(f"Discipline with ID {discipline_id} not found for update.")
        return None
    db_discipline = update_db_object(db_discipline, discipline_in)
    db.commit()
    db.refresh(db_discipline)
    logger.info(f"Discipline ID {discipline_id} updated.")
    return db_discipline

def delete_discipline(db: Session, discipline_id: int) -> bool:
    db_discipline = get_discipline(db, discipline_id)
    if not db_discipline:
        logger.warning(f"Discipline with ID {discipline_id} not found for deletion.")
        return False
    db.delete(db_discipline)
    db.commit()
    logger.info(f"Discipline ID {discipline_id} deleted.")
    return True

# --- Lesson CRUD ---
# Content files are attached through services.content_store, not here.
def create_lesson(db: Session, discipline_id: int, title: str, description: Optional[str], order: int) -> Lesson:
    logger.debug(f"Creating lesson '{title}' for discipline_id {discipline_id}")
    if not get_discipline(db, discipline_id):
        raise NotFoundError(f"Discipline with ID {discipline_id} not found.")

    db_lesson = Lesson(discipline_id=discipline_id, title=title, description=description, order=order)
    db.add(db_lesson)
    db.flush()
    logger.info(f"Lesson '{title}' (ID: {db_lesson.id}) created for discipline ID {discipline_id}.")
    return db_lesson

def get_lesson(db: Session, lesson_id: int) -> Optional[Lesson]:
    return db.query(Lesson).filter(Lesson.id == lesson_id).first()

def get_lesson_in_discipline(db: Session, discipline_id: int, lesson_id: int) -> Optional[Lesson]:
    return db.query(Lesson).filter(Lesson.id == lesson_id, Lesson.discipline_id == discipline_id).first()

def get_lessons_for_discipline(db: Session, discipline_id: int) -> List[Lesson]:
    return (
        db.query(Lesson)
        .filter(Lesson.discipline_id == discipline_id)
        .order_by(Lesson.order, Lesson.id)
        .all()
    )

def update_lesson(db: Session, lesson: Lesson, title: Optional[str] = None,
                  description: Optional[str] = None, order: Optional[int] = None) -> Lesson:
    """Applies the given fields and flushes. Committed by the caller along with any content change."""
    if title is not None:
        lesson.title = title
    if description is not None:
        lesson.description = description
    if order is not None:
        lesson.order = order
    db.flush()
    return lesson

def delete_lesson(db: Session, lesson: Lesson) -> None:
    lesson_id = lesson.id
    db.delete(lesson)
    db.commit()
    logger.info(f"Lesson ID {lesson_id} deleted.")

# --- Quiz & Question CRUD ---
def _build_questions(questions_in: List[schemas.QuestionCreate]) -> List[Question]:
    return [
        Question(position=position, text=q.text, options=list(q.options), answer=q.answer)
        for position, q in enumerate(questions_in)
    ]

def get_quiz(db: Session, quiz_id: int) -> Optional[Quiz]:
    logger.debug(f"Fetching quiz with ID: {quiz_id} along with questions")
    return db.query(Quiz).options(selectinload(Quiz.questions)).filter(Quiz.id == quiz_id).first()

def get_quiz_in_course(db: Session, course_id: int, quiz_id: int) -> Optional[Quiz]:
    return (
        db.query(Quiz)
        .options(selectinload(Quiz.questions))
        .filter(Quiz.id == quiz_id, Quiz.course_id == course_id)
        .first()
    )

def get_quizzes_for_course(db: Session, course_id: int) -> List[Quiz]:
    return (
        db.query(Quiz)
        .options(selectinload(Quiz.questions))
        .filter(Quiz.course_id == course_id)
        .order_by(Quiz.code)
        .all()
    )

def create_quiz(db: Session, course_id: int, quiz_in: schemas.QuizCreate) -> Quiz:
    logger.debug(f"Creating quiz '{quiz_in.code}' for course_id {course_id}")
    if not get_course(db, course_id):
        raise NotFoundError(f"Course with ID {course_id} not found.")
    if db.query(Quiz.id).filter(Quiz.code == quiz_in.code).first():
        logger.warning(f"Quiz code '{quiz_in.code}' already exists.")
        raise ConflictError("A quiz with this code already exists.")

    db_quiz = Quiz(
        course_id=course_id,
        code=quiz_in.code,
        title=quiz_in.title,
        description=quiz_in.description,
        questions=_build_questions(quiz_in.questions),
    )
    db.add(db_quiz)
    db.commit()
    db.refresh(db_quiz)
    logger.info(f"Quiz '{db_quiz.title}' (ID: {db_quiz.id}) created with {len(db_quiz.questions)} questions for course ID {course_id}.")
    return db_quiz

def update_quiz(db: Session, course_id: int, quiz_id: int, quiz_in: schemas.QuizUpdate) -> Optional[Quiz]:
    """Updates quiz fields and replaces all of its questions."""
    db_quiz = get_quiz_in_course(db, course_id, quiz_id)
    if not db_quiz:
        logger.warning(f"Quiz with ID {quiz_id} not found in course {course_id} for update.")
        return None
    code_taken = db.query(Quiz.id).filter(Quiz.code == quiz_in.code, Quiz.id != quiz_id).first()
    if code_taken:
        raise ConflictError("A quiz with this code already exists.")

    db_quiz.title = quiz_in.title
    db_quiz.code = quiz_in.code
    db_quiz.description = quiz_in.description
    db_quiz.questions.clear()
    db.flush() # delete-orphan removes the old questions before positions are reused
    db_quiz.questions.extend(_build_questions(quiz_in.questions))

    db.commit()
    db.refresh(db_quiz)
    logger.info(f"Quiz '{db_quiz.title}' (ID: {db_quiz.id}) updated with {len(db_quiz.questions)} questions.")
    return db_quiz

def delete_quiz(db: Session, course_id: int, quiz_id: int) -> bool:
    db_quiz = get_quiz_in_course(db, course_id, quiz_id)
    if not db_quiz:
        logger.warning(f"Quiz with ID {quiz_id} not found in course {course_id} for deletion.")
        return False
    db.delete(db_quiz)
    db.commit()
    logger.info(f"Quiz ID {quiz_id} deleted (questions and results cascade).")
    return True

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import get_current_admin_user, get_course_or_404
from coursehub.models.user_model import User
from coursehub.models.course_model import Course
from coursehub.schemas import course_schema as schemas
from coursehub.crud import course_crud as crud

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/courses", tags=["Courses"])

# --- Course Endpoints ---
@router.get("/public", response_model=List[schemas.CoursePublic])
def read_public_courses(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """
    Course catalogue for the landing page. No authentication required.
    """
    return crud.get_courses(db, skip=skip, limit=limit)

@router.post("/", response_model=schemas.CourseDisplay, status_code=status.HTTP_201_CREATED)
def create_new_course(
    course_in: schemas.CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Create a new course. (Admin only)
    """
    logger.info(f"Admin user {current_user.email} creating course: {course_in.title}")
    return crud.create_course(db=db, course_in=course_in)

@router.get("/", response_model=List[schemas.CourseDisplay])
def read_courses_list(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    All courses with disciplines, lessons, content and quizzes. (Admin only)
    """
    return crud.get_courses(db, skip=skip, limit=limit)

@router.get("/{course_id}", response_model=schemas.CourseDisplay)
def read_single_course(
    course: Course = Depends(get_course_or_404),
    current_user: User = Depends(get_current_admin_user)
):
    return course

@router.put("/{course_id}", response_model=schemas.CourseDisplay)
def update_existing_course(
    course_id: int,
    course_in: schemas.CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Update an existing course. (Admin only)
    """
    logger.info(f"Admin {current_user.email} updating course ID {course_id}")
    course = crud.update_course(db=db, course_id=course_id, course_in=course_in)
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course with ID {course_id} not found.")
    return course

@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Delete a course with its disciplines, lessons, quizzes and enrollments. (Admin only)
    """
    logger.info(f"Admin {current_user.email} deleting course ID {course_id}")
    if not crud.delete_course(db=db, course_id=course_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Course with ID {course_id} not found.")


# --- Discipline Endpoints ---
@router.post("/{course_id}/disciplines", response_model=schemas.DisciplineDisplay, status_code=status.HTTP_201_CREATED)
def create_new_discipline(
    course_id: int,
    discipline_in: schemas.DisciplineCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Add a discipline at the end of the course. (Admin only)
    """
    logger.info(f"Admin {current_user.email} creating discipline '{discipline_in.title}' for course ID {course_id}")
    return crud.create_discipline(db=db, discipline_in=discipline_in, course_id=course_id)

@router.put("/{course_id}/disciplines/{discipline_id}", response_model=schemas.DisciplineDisplay)
def update_existing_discipline(
    course_id: int,
    discipline_id: int,
    discipline_in: schemas.DisciplineUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    discipline = crud.get_discipline(db, discipline_id)
    if not discipline or discipline.course_id != course_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Discipline with ID {discipline_id} not found in course {course_id}.")
    return crud.update_discipline(db=db, discipline_id=discipline_id, discipline_in=discipline_in)

@router.delete("/{course_id}/disciplines/{discipline_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_discipline(
    course_id: int,
    discipline_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    discipline = crud.get_discipline(db, discipline_id)
    if not discipline or discipline.course_id != course_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Discipline with ID {discipline_id} not found in course {course_id}.")
    logger.info(f"Admin {current_user.email} deleting discipline ID {discipline_id}")
    crud.delete_discipline(db=db, discipline_id=discipline_id)

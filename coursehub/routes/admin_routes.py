from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import get_current_admin_user, get_user_or_404
from coursehub.models.enums import UserRole
from coursehub.models.user_model import User
from coursehub.schemas import user_schema as schemas
from coursehub.schemas.enrollment_schema import EnrollmentDisplay
from coursehub.crud import user_crud as crud, enrollment_crud

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin Panel"])


def to_student_display(student: User) -> schemas.StudentAdminDisplay:
    return schemas.StudentAdminDisplay(
        **schemas.UserDisplay.model_validate(student).model_dump(),
        enrollments=[
            schemas.EnrolledCourseRef(
                course_id=enrollment.course_id,
                course_title=enrollment.course.title,
                completed_time=enrollment.completed_time or 0,
            )
            for enrollment in student.enrollments
        ],
    )


def get_student_or_404(user: User = Depends(get_user_or_404)) -> User:
    if user.role != UserRole.STUDENT:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Student with ID {user.id} not found.")
    return user


# --- Student Management by Admin ---

@router.get("/students", response_model=List[schemas.StudentAdminDisplay])
def admin_list_students(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    """
    Admin: All students with the courses they are enrolled in.
    """
    logger.info(f"Admin {current_admin.email} listing students. Skip: {skip}, Limit: {limit}")
    return [to_student_display(student) for student in crud.get_students(db, skip=skip, limit=limit)]

@router.delete("/students/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_student(
    student: User = Depends(get_student_or_404),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    """
    Admin: Delete a student along with enrollments, progress, activities and quiz results.
    """
    logger.info(f"Admin {current_admin.email} deleting student ID {student.id} ({student.email})")
    crud.delete_user(db, student.id)

@router.post("/students/{user_id}/enroll/{course_id}", response_model=EnrollmentDisplay, status_code=status.HTTP_201_CREATED)
def admin_enroll_student(
    course_id: int,
    student: User = Depends(get_student_or_404),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    logger.info(f"Admin {current_admin.email} enrolling student ID {student.id} in course ID {course_id}")
    return enrollment_crud.create_enrollment(db, student.id, course_id)

@router.delete("/students/{user_id}/enroll/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_unenroll_student(
    course_id: int,
    student: User = Depends(get_student_or_404),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin_user)
):
    if not enrollment_crud.delete_enrollment(db, student.id, course_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enrollment not found.")
    logger.info(f"Admin {current_admin.email} unenrolled student ID {student.id} from course ID {course_id}")

from fastapi import APIRouter, Depends, File, Form, HTTPException, status, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
import logging

from coursehub.core.database import get_db
from coursehub.core.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_content_store,
    get_discipline_or_404,
    get_lesson_or_404,
)
from coursehub.models.enums import ContentType
from coursehub.models.user_model import User
from coursehub.models.course_model import Discipline, Lesson
from coursehub.schemas import course_schema as schemas
from coursehub.crud import course_crud as crud
from coursehub.services.content_store import ContentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/disciplines/{discipline_id}/lessons", tags=["Lessons"])


def pick_upload(
    video: Optional[UploadFile], pdf: Optional[UploadFile], image: Optional[UploadFile]
) -> Optional[Tuple[UploadFile, ContentType]]:
    """A lesson holds one file; when several are sent, video wins over pdf over image."""
    for upload, content_type in ((video, ContentType.VIDEO), (pdf, ContentType.PDF), (image, ContentType.IMAGE)):
        if upload is not None and upload.filename:
            return upload, content_type
    return None


@router.get("/", response_model=List[schemas.LessonDisplay])
def read_lessons_for_discipline(
    discipline: Discipline = Depends(get_discipline_or_404),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud.get_lessons_for_discipline(db, discipline.id)

@router.post("/", response_model=schemas.LessonDisplay, status_code=status.HTTP_201_CREATED)
def create_new_lesson(
    discipline: Discipline = Depends(get_discipline_or_404),
    title: str = Form(..., min_length=1, max_length=255),
    description: Optional[str] = Form(None),
    order: int = Form(1),
    video: Optional[UploadFile] = File(None),
    pdf: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Create a lesson, optionally with one video, PDF or image file. (Admin only)
    """
    logger.info(f"Admin {current_user.email} creating lesson '{title}' in discipline ID {discipline.id}")
    lesson = crud.create_lesson(db, discipline.id, title, description, order)

    selected = pick_upload(video, pdf, image)
    if selected:
        store.replace_lesson_content(db, lesson, *selected)
    else:
        db.commit()
    db.refresh(lesson)
    return lesson

@router.put("/{lesson_id}", response_model=schemas.LessonDisplay)
def update_existing_lesson(
    lesson: Lesson = Depends(get_lesson_or_404),
    title: Optional[str] = Form(None, min_length=1, max_length=255),
    description: Optional[str] = Form(None),
    order: Optional[int] = Form(None),
    video: Optional[UploadFile] = File(None),
    pdf: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Update lesson fields; a new file replaces the current content. (Admin only)
    """
    crud.update_lesson(db, lesson, title=title, description=description, order=order)

    selected = pick_upload(video, pdf, image)
    if selected:
        store.replace_lesson_content(db, lesson, *selected)
    else:
        db.commit()
    db.refresh(lesson)
    logger.info(f"Admin {current_user.email} updated lesson ID {lesson.id}")
    return lesson

@router.delete("/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_existing_lesson(
    lesson: Lesson = Depends(get_lesson_or_404),
    db: Session = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Delete a lesson together with its content file. (Admin only)
    """
    store.remove_lesson_content(db, lesson)
    crud.delete_lesson(db, lesson)

@router.delete("/{lesson_id}/content/{content_type}", response_model=schemas.LessonDisplay)
def delete_lesson_content(
    content_type: ContentType,
    lesson: Lesson = Depends(get_lesson_or_404),
    db: Session = Depends(get_db),
    store: ContentStore = Depends(get_content_store),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Remove the lesson's file if it is of the given type. (Admin only)
    """
    if not store.remove_lesson_content(db, lesson, content_type):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson has no content.")
    db.refresh(lesson)
    return lesson

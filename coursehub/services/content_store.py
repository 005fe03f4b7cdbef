"""
Physical storage of lesson content files under the uploads directory.

Files are grouped per content type (`videos/`, `pdfs/`, `images/`) and given a
unique `<timestamp>-<random><ext>` name. The public URL of a stored file is
`/uploads/<folder>/<filename>`, which the media route streams back.
"""
import logging
import os
import secrets
import shutil
import time
from typing import Optional

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.core.exceptions import StorageError, ValidationFailedError
from coursehub.models.course_model import Content, Lesson
from coursehub.models.enums import ContentType

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {
    ContentType.VIDEO: {".mp4"},
    ContentType.PDF: {".pdf"},
    ContentType.IMAGE: {".jpg", ".jpeg", ".png", ".gif"},
}


def unique_filename(original_name: Optional[str]) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


class ContentStore:
    def __init__(self, root: str):
        self.root = root

    def ensure_directories(self):
        for content_type in ContentType:
            os.makedirs(os.path.join(self.root, content_type.upload_folder), exist_ok=True)
        logger.info(f"Upload directories ready under {self.root}")

    def path_for(self, content: Content) -> str:
        return os.path.join(self.root, content.type.upload_folder, content.filename)

    def save(self, upload: UploadFile, content_type: ContentType) -> Content:
        """Writes the upload to disk and returns an unsaved Content record for it."""
        ext = os.path.splitext(upload.filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS[content_type]:
            raise ValidationFailedError(f"Unsupported file type '{ext or upload.filename}' for {content_type.value} content.")

        folder = content_type.upload_folder
        filename = unique_filename(upload.filename)
        destination = os.path.join(self.root, folder, filename)
        try:
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            with open(destination, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
        except OSError as e:
            logger.error(f"Failed to store upload '{upload.filename}' at {destination}: {e}", exc_info=True)
            raise StorageError("Could not store uploaded file.") from e

        size = os.path.getsize(destination)
        logger.info(f"Stored {content_type.value} upload '{upload.filename}' as {folder}/{filename} ({size} bytes)")
        return Content(
            type=content_type,
            url=f"/uploads/{folder}/{filename}",
            filename=filename,
            mime_type=upload.content_type,
            size=size,
        )

    def delete_file(self, path: str):
        """Unlinks a stored file. Failures are logged, never raised."""
        try:
            os.remove(path)
            logger.info(f"Deleted content file {path}")
        except FileNotFoundError:
            logger.warning(f"Content file {path} was already missing.")
        except OSError as e:
            logger.error(f"Could not delete content file {path}: {e}", exc_info=True)

    def replace_lesson_content(self, db: Session, lesson: Lesson, upload: UploadFile, content_type: ContentType) -> Content:
        """
        Attaches a new file to the lesson and commits, together with any pending
        lesson changes. The previous Content record goes in the same commit and
        its file is unlinked afterwards.
        """
        new_content = self.save(upload, content_type)
        previous = lesson.content
        previous_id = previous.id if previous is not None else None
        previous_path = self.path_for(previous) if previous is not None else None

        try:
            db.add(new_content)
            if previous is not None:
                lesson.content = None
                db.flush()  # release the unique content_id before rebinding
                db.delete(previous)
            lesson.content = new_content
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error attaching content to lesson {lesson.id}: {e}", exc_info=True)
            self.delete_file(self.path_for(new_content))
            raise StorageError() from e

        db.refresh(new_content)
        if previous_path is not None:
            logger.info(f"Lesson {lesson.id}: replaced content {previous_id} with {new_content.id}")
            self.delete_file(previous_path)
        return new_content

    def remove_lesson_content(self, db: Session, lesson: Lesson, content_type: Optional[ContentType] = None) -> bool:
        """
        Removes the lesson's content and commits. With `content_type`, only if
        the stored content has that type. Returns False if there was none.
        """
        content = lesson.content
        if content is None:
            return False
        if content_type is not None and content.type != content_type:
            raise ValidationFailedError(f"Lesson {lesson.id} has no {content_type.value} content.")

        content_id, stored_type, path = content.id, content.type, self.path_for(content)
        try:
            lesson.content = None
            db.flush()
            db.delete(content)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error removing content from lesson {lesson.id}: {e}", exc_info=True)
            raise StorageError() from e

        self.delete_file(path)
        logger.info(f"Lesson {lesson.id}: removed {stored_type.value} content {content_id}")
        return True

import enum

class UserRole(str, enum.Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"

class ContentType(str, enum.Enum):
    VIDEO = "VIDEO"
    PDF = "PDF"
    IMAGE = "IMAGE"

    @property
    def upload_folder(self) -> str:
        # videos, pdfs, images
        return f"{self.value.lower()}s"

class ActivityType(str, enum.Enum):
    LESSON = "LESSON"
    QUIZ = "QUIZ"

class CompletionStatus(str, enum.Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"

# Enum columns use `values_callable` so the stored strings are the enum values.
# Without native DB enum types SQLAlchemy falls back to VARCHAR + CHECK, which is fine here.

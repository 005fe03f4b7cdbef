from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from coursehub.models.enums import UserRole

class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=255)
    role: UserRole = UserRole.STUDENT

# Schema for creating a user in our database AFTER Firebase authentication
class UserCreateInternal(UserBase):
    firebase_uid: str

# Schema for displaying user information (sending data back to client)
class UserDisplay(UserBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Schema representing the data decoded from a Firebase ID token
class TokenData(BaseModel):
    firebase_uid: str
    email: EmailStr


# Request body for /auth/register; the client signs up with Firebase first
class UserRegisterRequest(BaseModel):
    firebase_id_token: str
    full_name: Optional[str] = Field(None, max_length=255)


class AuthResponse(BaseModel):
    message: str
    user: Optional[UserDisplay] = None


# --- Admin Specific Schemas ---
class EnrolledCourseRef(BaseModel):
    course_id: int
    course_title: str
    completed_time: int = 0

class StudentAdminDisplay(UserDisplay):
    """Student row for the admin panel, with the courses they are enrolled in."""
    enrollments: List[EnrolledCourseRef] = []

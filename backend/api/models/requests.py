"""
Pydantic request models for API endpoints.
"""
from pydantic import BaseModel, Field


class CourseGenerateRequest(BaseModel):
    """Request model for syllabus generation."""
    topic: str = Field(..., min_length=1, description="Subject to build a course for, e.g. Algebra")
    level: str = Field(..., min_length=1, description="Class level, e.g. JSS1 or SS3")
    user_id: str = Field(..., min_length=1, description="Owner of the new course")


class LessonCompleteRequest(BaseModel):
    """Request model for marking a lesson finished."""
    user_id: str = Field(..., min_length=1, description="User ID")


class SessionEndRequest(BaseModel):
    """Request model sent when a voice study call ends."""
    user_id: str = Field(..., min_length=1, description="User ID")
    duration_seconds: int = Field(default=0, ge=0, description="Call duration in seconds")

"""Pydantic schemas for the submission API."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionOut(BaseModel):
    """A stored submission as returned to the client."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    message: str
    attachment_path: Optional[str] = Field(None, serialization_alias="attachmentPath")
    created_at: datetime = Field(..., serialization_alias="createdAt")


class SubmissionResponse(BaseModel):
    """Schema for a successful form submission."""
    success: bool = True
    data: SubmissionOut


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx response."""
    error: str

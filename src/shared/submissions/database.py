"""Database model for form submissions."""

import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime

from src.shared.database import Base


class Submission(Base):
    """One stored form entry. Created once, never updated."""
    __tablename__ = "submissions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    attachment_path = Column(String, nullable=True)  # Path under the upload directory, or NULL
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

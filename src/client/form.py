"""
Client-side contact form state, validation and submission.
Validation here is advisory only; the server re-checks everything it needs.
"""

import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import requests

ALLOWED_FILE_TYPES = ("application/pdf", "image/jpeg", "image/png")
MAX_FILE_SIZE_MB = 5

DEFAULT_API_URL = os.getenv("FORM_API_URL", "http://localhost:3001").rstrip("/")
REQUEST_TIMEOUT_SECONDS = 30

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

GENERIC_SUBMIT_ERROR = "Failed to submit. Please try again later."


@dataclass
class Attachment:
    """A file picked by the user, held in memory until submit."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path) -> "Attachment":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content_type=content_type, data=path.read_bytes())


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class SubmissionForm:
    """Editable form state plus the submit flow against POST /api/form."""

    def __init__(self, api_url: str = DEFAULT_API_URL,
                 session: Optional[requests.Session] = None):
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.name = ""
        self.email = ""
        self.message = ""
        self.attachment: Optional[Attachment] = None
        self.errors: Dict[str, str] = {}
        self.is_submitting = False
        self.is_success = False

    def set_attachment(self, attachment: Optional[Attachment]) -> None:
        self.attachment = attachment

    def validate(self) -> bool:
        """Recomputes per-field errors. Returns True when there are none."""
        errors = {}
        if not self.name.strip():
            errors["name"] = "Name is required."

        if not self.email.strip():
            errors["email"] = "Email is required."
        elif not is_valid_email(self.email):
            errors["email"] = "Invalid email format."

        if not self.message.strip():
            errors["message"] = "Message is required."
        elif len(self.message.strip()) < 20:
            errors["message"] = "Message must be at least 20 characters."

        if self.attachment:
            if self.attachment.content_type not in ALLOWED_FILE_TYPES:
                errors["attachment"] = "Invalid file type (only PDF, JPG, PNG allowed)."
            if self.attachment.size / (1024 * 1024) > MAX_FILE_SIZE_MB:
                errors["attachment"] = f"File must be under {MAX_FILE_SIZE_MB} MB."

        self.errors = errors
        return not errors

    def reset(self) -> None:
        self.name = ""
        self.email = ""
        self.message = ""
        self.attachment = None
        self.errors = {}

    def submit(self) -> bool:
        """
        Validates and posts the form. Returns True on success.
        A second call while a request is in flight is ignored.
        """
        if self.is_submitting:
            return False

        self.is_success = False
        if not self.validate():
            return False

        self.is_submitting = True
        try:
            data = {"name": self.name, "email": self.email, "message": self.message}
            files = None
            if self.attachment:
                files = {
                    "attachment": (
                        self.attachment.filename,
                        self.attachment.data,
                        self.attachment.content_type,
                    )
                }
            response = self.session.post(
                f"{self.api_url}/api/form",
                data=data,
                files=files,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logging.error(f"Form submission failed: {str(e)}")
            self.errors = {"form": GENERIC_SUBMIT_ERROR}
            return False
        finally:
            self.is_submitting = False

        if not response.ok:
            error = result.get("error") if isinstance(result, dict) else None
            self.errors = {"form": error or "Server error"}
            return False

        self.is_success = True
        self.reset()
        return True

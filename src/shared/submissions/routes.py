"""Form submission route: validates the multipart form and stores it."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from src.shared.config import ServiceConfig, get_config
from src.shared.database import get_db
from src.shared.submissions.database import Submission
from src.shared.submissions.schemas import ErrorResponse, SubmissionOut, SubmissionResponse
from src.shared.upload_files.upload_files import has_attachment, save_attachment, validate_attachment

router = APIRouter(prefix="/api", tags=["submissions"])

MISSING_FIELDS_ERROR = "Missing required fields."
SAVE_FAILED_ERROR = "Server error while saving submission."


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _handle_save_error(e: Exception, attachment_path: Optional[str]):
    """Passes HTTP errors through; anything else becomes an opaque 500."""
    if isinstance(e, HTTPException):
        raise e
    logging.error(f"Error during form save: {str(e)}", exc_info=True)
    if attachment_path:
        # No cleanup: the stored file outlives the failed insert
        logging.warning(f"Attachment {attachment_path} has no submission record")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=SAVE_FAILED_ERROR
    )


@router.post(
    "/form",
    response_model=SubmissionResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_form(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    config: ServiceConfig = Depends(get_config),
):
    """
    Store one contact form entry.

    - name, email and message must all be present and non-blank
    - attachment is optional; PDF, JPEG or PNG up to 5 MB
    - the stored file path (or null) is returned as attachmentPath
    """
    file_info = (
        f"{attachment.filename} ({attachment.content_type})"
        if has_attachment(attachment) else "none"
    )
    logging.info(
        f"Received POST /api/form: name={name!r}, email={email!r}, "
        f"message_length={len(message or '')}, attachment={file_info}"
    )

    if _is_blank(name) or _is_blank(email) or _is_blank(message):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MISSING_FIELDS_ERROR
        )

    attachment_path = None
    try:
        if has_attachment(attachment):
            validate_attachment(attachment)
            attachment_path = str(await save_attachment(attachment, config.upload_dir))

        submission = Submission(
            name=name,
            email=email,
            message=message,
            attachment_path=attachment_path,
        )
        db.add(submission)
        db.commit()
        db.refresh(submission)
    except Exception as e:
        db.rollback()
        _handle_save_error(e, attachment_path)

    logging.info(f"Saved submission: {submission.id}")
    return SubmissionResponse(success=True, data=SubmissionOut.model_validate(submission))

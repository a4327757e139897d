"""
ASGI middleware that caps request body size on upload routes.
Oversized bodies are refused before they are buffered to disk or memory.
"""

import logging
from typing import Iterable

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from src.shared.upload_files.upload_files import MAX_FILE_SIZE_BYTES, FILE_TOO_LARGE_ERROR

# Room for the text fields and multipart framing on top of the file itself
FORM_FIELDS_ALLOWANCE_BYTES = 1024 * 1024
MAX_REQUEST_BODY_BYTES = MAX_FILE_SIZE_BYTES + FORM_FIELDS_ALLOWANCE_BYTES


class UploadSizeLimitMiddleware:
    """
    Rejects POST requests to the given paths whose body exceeds max_body_size.
    A declared Content-Length is checked up front; streamed bodies are counted
    chunk by chunk and aborted once they cross the limit.
    """

    def __init__(self, app, max_body_size: int = MAX_REQUEST_BODY_BYTES,
                 paths: Iterable[str] = ("/api/form",)):
        self.app = app
        self.max_body_size = max_body_size
        self.paths = frozenset(paths)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["method"] != "POST" or scope["path"] not in self.paths:
            await self.app(scope, receive, send)
            return

        content_length = self._content_length(scope)
        if content_length is not None and content_length > self.max_body_size:
            logging.warning(
                f"Rejected {scope['path']} upload: Content-Length {content_length} "
                f"exceeds {self.max_body_size} bytes"
            )
            response = JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"error": FILE_TOO_LARGE_ERROR},
                headers={"Connection": "close"},
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logging.warning(
                        f"Rejected {scope['path']} upload: body exceeded {self.max_body_size} bytes"
                    )
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=FILE_TOO_LARGE_ERROR
                    )
            return message

        await self.app(scope, limited_receive, send)

    @staticmethod
    def _content_length(scope):
        for key, value in scope.get("headers", []):
            if key == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None

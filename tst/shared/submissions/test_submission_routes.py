"""Tests for POST /api/form."""

from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.shared.upload_files.upload_files import MAX_FILE_SIZE_BYTES

VALID_FORM = {
    "name": "Ada",
    "email": "ada@example.com",
    "message": "This message is definitely long enough.",
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_submission_without_attachment_is_stored(client, count_submissions):
    response = client.post("/api/form", data=VALID_FORM)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Ada"
    assert body["data"]["email"] == "ada@example.com"
    assert body["data"]["message"] == VALID_FORM["message"]
    assert body["data"]["attachmentPath"] is None
    assert body["data"]["createdAt"]
    assert body["data"]["id"]
    assert count_submissions() == 1


def test_email_format_is_not_checked_by_server(client):
    response = client.post("/api/form", data={**VALID_FORM, "email": "not-an-email"})

    assert response.status_code == 200
    assert response.json()["data"]["email"] == "not-an-email"


@pytest.mark.parametrize("missing", ["name", "email", "message"])
def test_missing_field_is_rejected(client, count_submissions, missing):
    data = {k: v for k, v in VALID_FORM.items() if k != missing}

    response = client.post("/api/form", data=data)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields."}
    assert count_submissions() == 0


def test_blank_field_is_rejected(client, count_submissions):
    response = client.post("/api/form", data={**VALID_FORM, "name": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields."}
    assert count_submissions() == 0


def test_missing_field_with_attachment_writes_no_file(client, config):
    data = {k: v for k, v in VALID_FORM.items() if k != "message"}
    files = {"attachment": ("photo.png", PNG_BYTES, "image/png")}

    response = client.post("/api/form", data=data, files=files)

    assert response.status_code == 400
    assert list(config.upload_dir.iterdir()) == []


def test_attachment_is_stored_and_served(client, config):
    files = {"attachment": ("my photo.png", PNG_BYTES, "image/png")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 200
    stored = Path(response.json()["data"]["attachmentPath"])
    assert stored.parent == config.upload_dir
    assert stored.name.endswith("-my_photo.png")
    assert stored.read_bytes() == PNG_BYTES

    served = client.get(f"/uploads/{stored.name}")
    assert served.status_code == 200
    assert served.content == PNG_BYTES
    assert served.headers["content-type"] == "image/png"


def test_pdf_attachment_is_accepted(client):
    files = {"attachment": ("cv.pdf", b"%PDF-1.4\n%%EOF", "application/pdf")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 200
    assert response.json()["data"]["attachmentPath"].endswith("-cv.pdf")


def test_disallowed_attachment_type_is_rejected(client, config, count_submissions):
    files = {"attachment": ("notes.txt", b"hello", "text/plain")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid file type. Only PDF, JPG, PNG allowed."}
    assert count_submissions() == 0
    assert list(config.upload_dir.iterdir()) == []


def test_attachment_just_over_limit_leaves_nothing_behind(client, config, count_submissions):
    files = {"attachment": ("big.pdf", b"0" * (MAX_FILE_SIZE_BYTES + 1), "application/pdf")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 413
    assert response.json() == {"error": "File too large. Maximum size is 5 MB."}
    assert count_submissions() == 0
    assert list(config.upload_dir.iterdir()) == []


def test_attachment_far_over_limit_is_refused_up_front(client, config, count_submissions):
    files = {"attachment": ("huge.pdf", b"0" * (7 * 1024 * 1024), "application/pdf")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 413
    assert response.json() == {"error": "File too large. Maximum size is 5 MB."}
    assert count_submissions() == 0
    assert list(config.upload_dir.iterdir()) == []


def test_empty_file_part_counts_as_no_attachment(client):
    files = {"attachment": ("", b"", "application/octet-stream")}

    response = client.post("/api/form", data=VALID_FORM, files=files)

    assert response.status_code == 200
    assert response.json()["data"]["attachmentPath"] is None


def test_database_failure_returns_generic_error(app, client, count_submissions):
    original_factory = app.state.session_factory

    def failing_factory():
        db = original_factory()

        def fail_commit():
            raise SQLAlchemyError("disk I/O error at /var/lib/db")

        db.commit = fail_commit
        return db

    app.state.session_factory = failing_factory
    response = client.post("/api/form", data=VALID_FORM)
    app.state.session_factory = original_factory

    assert response.status_code == 500
    assert response.json() == {"error": "Server error while saving submission."}
    assert "disk" not in response.text
    assert count_submissions() == 0


def test_error_responses_carry_cors_headers(client):
    response = client.post(
        "/api/form",
        data={"name": "Ada"},
        headers={"Origin": "http://localhost:3000"},
    )

    assert response.status_code == 400
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

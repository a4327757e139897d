import pytest
from fastapi.testclient import TestClient

from src.app import create_app
from src.shared.config import ServiceConfig
from src.shared.submissions.database import Submission


@pytest.fixture
def config(tmp_path):
    return ServiceConfig(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=tmp_path / "uploads",
        allowed_origin="http://localhost:3000",
    )


@pytest.fixture
def app(config):
    return create_app(config)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def count_submissions(app):
    def _count():
        db = app.state.session_factory()
        try:
            return db.query(Submission).count()
        finally:
            db.close()
    return _count

import pytest

from linkshelf import create_app
from linkshelf.config import TestConfig
from linkshelf.extensions import db
from linkshelf.services.metadata import PageMetadata


def fake_fetch_metadata(url, timeout=None, max_bytes=None, text_chars=None):
    return PageMetadata(
        title=f"Title for {url}",
        favicon=f"{url.rstrip('/')}/favicon.ico",
        description=f"About {url}",
        text=f"Body of {url}",
    )


def fake_generate_summary(url, description, settings, content=None):
    return f"Summary: {description}"


@pytest.fixture(autouse=True)
def fake_collaborators(monkeypatch):
    monkeypatch.setattr("linkshelf.api.routes.fetch_metadata", fake_fetch_metadata)
    monkeypatch.setattr("linkshelf.api.routes.generate_summary", fake_generate_summary)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()

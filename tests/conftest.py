import uuid
import pytest
from backoffice import create_app
from backoffice.extensions import db as _db
from backoffice.models.location import Location


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Per-test database session with rollback."""
    with app.app_context():
        _db.session.begin_nested()
        yield _db
        _db.session.rollback()


@pytest.fixture
def location(db):
    """A committed stock location with a unique code."""
    loc = Location(name="Test warehouse", code=f"T-{uuid.uuid4().hex[:8]}")
    db.session.add(loc)
    db.session.commit()
    return loc

"""Shared test fixtures."""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from smartcrm.database import Base, SessionLocal


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created.

    StaticPool keeps one connection so every session (and the Flask test
    client's thread) sees the same in-memory database.
    """
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    import smartcrm.models.contact
    import smartcrm.models.deal
    import smartcrm.models.activity
    import smartcrm.models.agent
    import smartcrm.models.engagement
    import smartcrm.models.video
    import smartcrm.models.events
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def bind_sessions(db_engine):
    """Point get_session() at the test engine for every test."""
    original_bind = SessionLocal.kw.get('bind')
    SessionLocal.configure(bind=db_engine)
    yield
    SessionLocal.configure(bind=original_bind)


@pytest.fixture
def db_session(db_engine):
    """Session for arranging and asserting rows directly."""
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def mock_queue():
    """Mock RQ queue used by the inbound-email dispatcher."""
    mock = MagicMock()
    with patch('smartcrm.agents.inbound._get_queue', return_value=mock):
        yield mock


@pytest.fixture
def app():
    """Flask test app."""
    from smartcrm import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_contact(db_session):
    """Factory fixture — inserts a Contact row and returns its id."""
    from smartcrm.models.contact import Contact

    def _make(**overrides):
        defaults = dict(
            name='Jane Morrison',
            first_name='Jane',
            last_name='Morrison',
            email='jane@acme.example.com',
            company='Acme Corp',
            title='VP Sales',
            industry='SaaS',
            status='lead',
        )
        defaults.update(overrides)
        contact = Contact(**defaults)
        db_session.add(contact)
        db_session.commit()
        return contact.id
    return _make


@pytest.fixture
def openai_mock():
    """Patch the shared OpenAI client; returns the mock client."""
    mock_client = MagicMock()
    with patch('smartcrm.services.openai_client.client', mock_client):
        yield mock_client

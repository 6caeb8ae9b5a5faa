import itertools
import os

# The in-memory database and the secret must be in place before the app is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from sample_app.auth import hash_password  # noqa: E402
from sample_app.database import Base, SessionLocal, engine, get_db  # noqa: E402
from sample_app.main import app  # noqa: E402
from sample_app.models import Micropost, User  # noqa: E402

DEFAULT_NAME = "Mathias Sasse"
DEFAULT_EMAIL = "mathiasmex@sampleapp.com"
DEFAULT_PASSWORD = "yelapamex"

_email_sequence = itertools.count(1)
_hash_cache = {}


def _next_email() -> str:
    return f"person-{next(_email_sequence)}@example.com"


def _hashed(password: str) -> str:
    if password not in _hash_cache:
        _hash_cache[password] = hash_password(password)
    return _hash_cache[password]


@pytest.fixture()
def db_session():
    """Provide a fresh test database session for each test.

    The schema is dropped and recreated for every test function,
    ensuring complete isolation between tests.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session):
    """TestClient whose requests share the test's database session."""

    def override_get_db():
        try:
            yield db_session
        finally:
            # Session cleanup is handled by the db_session fixture.
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def user_factory(db_session):
    """Create users directly in the test database.

    Defaults mirror a single canned user; pass ``email=next_email()`` when a
    test needs more than one.
    """

    def _create_user(
        name: str = DEFAULT_NAME,
        email: str = DEFAULT_EMAIL,
        password: str = DEFAULT_PASSWORD,
        admin: bool = False,
    ) -> User:
        user = User(name=name, email=email.lower(), password_hash=_hashed(password), admin=admin)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create_user


@pytest.fixture()
def next_email():
    """Sequence of unique addresses: person-1@example.com, person-2@..."""
    return _next_email


@pytest.fixture()
def micropost_factory(db_session):
    def _create_micropost(user: User, content: str = "Foo bar") -> Micropost:
        micropost = Micropost(user_id=user.id, content=content)
        db_session.add(micropost)
        db_session.commit()
        db_session.refresh(micropost)
        return micropost

    return _create_micropost


@pytest.fixture()
def sign_in(client):
    """Sign ``user`` in through the real sign-in form and return them."""

    def _sign_in(user: User, password: str = DEFAULT_PASSWORD) -> User:
        response = client.post(
            "/signin",
            data={"session[email]": user.email, "session[password]": password},
            follow_redirects=False,
        )
        assert response.status_code == 303
        return user

    return _sign_in

"""
Shared fixtures.

Every test gets a fresh app bound to its own in-memory SQLite database.
Service tests run inside `ctx` (an app context); HTTP tests use `client`
without an outer context so each request gets its own session and g.
"""
import pytest

from app import create_app
from app.extensions import db as _db
from app.models import User, Profile, Topic, Post

PASSWORD = "correct-horse-battery"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(username: str, email: str = None, password: str = PASSWORD) -> User:
    """Create a user + profile.  Call inside an app context."""
    user = User(email=email or f"{username}@example.com", is_active=True)
    user.set_password(password)
    user.profile = Profile(username=username)
    _db.session.add(user)
    _db.session.commit()
    return user


def topic_id(name: str) -> int:
    return Topic.query.filter_by(name=name).one().id


def make_post(user, title="Pineapple belongs on pizza", content="Fight me.", topics=("Culture",)) -> Post:
    from app.utils.debate_service import create_post
    return create_post(user, title, content, [topic_id(t) for t in topics])


@pytest.fixture
def alice(ctx):
    return make_user("alice")


@pytest.fixture
def bob(ctx):
    return make_user("bob")


def register(client, username: str, password: str = PASSWORD):
    return client.post("/auth/register", data={
        "username":         username,
        "email":            f"{username}@example.com",
        "password":         password,
        "confirm_password": password,
    }, follow_redirects=False)


@pytest.fixture
def auth_client(app):
    """A test client already signed in as 'carol'."""
    client = app.test_client()
    resp = register(client, "carol")
    assert resp.status_code == 302
    return client

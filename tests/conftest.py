import os

# Configure before any project import creates the storage singleton
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_CLEANUP_ENABLED"] = "false"

import pytest  # noqa: E402

from api import create_app  # noqa: E402
from api.members import create_member  # noqa: E402
from models import storage  # noqa: E402
from models.user import User  # noqa: E402
from utils.principal import Role  # noqa: E402
from utils.security import hash_password  # noqa: E402

PASSWORD = "s3cret-pass"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now = self.now + delta
        return self.now


@pytest.fixture
def app():
    storage.drop_all()
    storage.reload()
    app = create_app("testing")
    # most tests fire far more than 15 requests from 127.0.0.1
    app.extensions["rate_limiter"].limit = 10_000
    with app.app_context():
        yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def codec(app):
    return app.extensions["token_codec"]


@pytest.fixture
def user_store(app):
    return app.extensions["token_stores"]["user"]


@pytest.fixture
def member_store(app):
    return app.extensions["token_stores"]["member"]


@pytest.fixture
def user(app):
    u = User(name="Jane", email="jane@example.com", password_hash=hash_password(PASSWORD))
    storage.new(u)
    storage.save()
    return u


@pytest.fixture
def supervisor(app):
    return create_member("Sue", "Visor", "sue@example.com", PASSWORD, role=Role.SUPERVISOR)


@pytest.fixture
def creator(app):
    return create_member("Cree", "Ator", "cree@example.com", PASSWORD, role=Role.CREATOR)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def login_user(client, email="jane@example.com", password=PASSWORD):
    return client.post("/user/login", json={"email": email, "password": password})


def login_member(client, email, password=PASSWORD):
    return client.post("/member/login", json={"email": email, "password": password})

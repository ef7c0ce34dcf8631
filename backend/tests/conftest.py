import os

# Settings are cached on first import; point the app engine at SQLite before anything loads them.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from examdesk.api.deps import get_db  # noqa: E402
from examdesk.db.base import Base  # noqa: E402
from examdesk.main import app  # noqa: E402
from examdesk.services.generation_lock import clear_generation_locks  # noqa: E402

SCHOOL_HEADERS = {"X-School-Id": "1", "X-Actor": "exam-office"}


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    clear_generation_locks()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        test_client.headers.update(SCHOOL_HEADERS)
        yield test_client

    app.dependency_overrides.clear()
    clear_generation_locks()

import os
import sys
from pathlib import Path

BACKEND_PATH = Path(__file__).resolve().parents[1]
if str(BACKEND_PATH) not in sys.path:
    sys.path.insert(0, str(BACKEND_PATH))

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "Zq8vT3nL0pXe7Rk2Wm5Yc9Hb4Gd1Fs6JuQa")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["EMAIL_DELIVERY"] = "inline"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from moneymanager.database.db_service import DatabaseService
from moneymanager.database.models import Base
from moneymanager.models.schemas import Profile


class RecordingMailer:
    """Collects outgoing mail instead of talking to SMTP."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def _record(self, to_email, **message):
        if to_email in self.fail_for:
            return {"success": False, "error": "mailbox unavailable", "method": "test"}
        self.sent.append({"to": to_email, **message})
        return {"success": True, "method": "test", "to": to_email}

    def send_email(self, to_email, subject, body, html=False):
        return self._record(to_email, subject=subject, body=body, html=html)

    def send_email_with_attachment(self, to_email, subject, body, attachment, filename):
        return self._record(to_email, subject=subject, body=body, attachment=attachment, filename=filename)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def db(session):
    return DatabaseService(session)


@pytest.fixture
def make_mailer():
    return RecordingMailer


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def make_profile(db):
    """Insert an active profile directly, skipping password hashing."""
    def _make(email="alice@example.com", full_name="Alice"):
        doc = db.insert("profiles", {
            "full_name": full_name,
            "email": email,
            "password_hash": "",
            "is_active": True,
        })
        db.commit()
        return Profile(**doc)
    return _make


@pytest.fixture
def client(engine, mailer):
    from fastapi.testclient import TestClient

    from moneymanager.database.connection import get_db
    from moneymanager.main import app
    from moneymanager.services.email_service import get_mailer

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()

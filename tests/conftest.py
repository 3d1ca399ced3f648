import os
import sys

# Ensure Python path includes project root for `import badger`
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Test environment: in-memory SQLite, log notifier, fixed public origin
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BASE_URL", "http://badges.test")
os.environ.setdefault("NOTIFIER", "log")
os.environ.pop("SMTP_HOST", None)

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.service import BadgesService
from badger.core.notifications import BaseNotifier
from badger.db.base import async_session_context, create_db_and_tables, drop_db_and_tables
from badger.workers.tasks import celery_app

celery_app.conf.task_always_eager = True
celery_app.conf.task_eager_propagates = True

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class RecordingNotifier(BaseNotifier):
    name = "recording"

    def __init__(self) -> None:
        self.awards = []
        self.codes = []

    async def notify(self, user, instance) -> None:
        self.awards.append((user, instance.badge.shortname))

    async def notify_claim_code(self, user, badge, code) -> None:
        self.codes.append((user, badge.shortname, code))


class FailingNotifier(BaseNotifier):
    name = "failing"

    async def notify(self, user, instance) -> None:
        raise RuntimeError("mail server on fire")

    async def notify_claim_code(self, user, badge, code) -> None:
        raise RuntimeError("mail server on fire")


@pytest_asyncio.fixture(scope="function")
async def setup_db():
    await create_db_and_tables()
    yield
    await drop_db_and_tables()


@pytest_asyncio.fixture
async def db_session(setup_db) -> AsyncSession:
    async with async_session_context() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def badge_factory(db_session: AsyncSession):
    service = BadgesService(db_session)

    async def _make(name: str, **attrs):
        attrs.setdefault("description", f"{name} description")
        attrs.setdefault("image", PNG)
        return await service.create_badge(name=name, **attrs)

    return _make


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()

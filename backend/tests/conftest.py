import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["EMAIL_BACKEND"] = "log"
os.environ.setdefault("JWT_SECRET", "test-secret")

import httpx
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from hackboard.db import Base, get_session, make_engine
from hackboard.main import create_app
from hackboard.models.participant import Admin, Participant
from hackboard.security import make_access_token


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'hackboard.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def app(session_factory):
    app = create_app(session_factory)

    async def _session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _session
    yield app
    await app.state.runtime.shutdown()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def add_participant(session, name, email=None, total_points=0, task_count=0) -> Participant:
    p = Participant(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        total_points=total_points,
        task_count=task_count,
    )
    session.add(p)
    await session.commit()
    return p


async def add_admin(session, email="admin@example.com") -> Admin:
    a = Admin(email=email)
    session.add(a)
    await session.commit()
    return a


def participant_headers(p: Participant) -> dict:
    return {"Authorization": f"Bearer {make_access_token(str(p.id), 'participant', p.email)}"}


def admin_headers(a: Admin) -> dict:
    return {"Authorization": f"Bearer {make_access_token(str(a.id), 'admin', a.email)}"}


class RecordingListener:
    """Stands in for a WebSocket on the leaderboard hub."""

    def __init__(self, fail: bool = False):
        self.messages = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.messages.append(data)

    def events(self):
        return [m["event"] for m in self.messages]

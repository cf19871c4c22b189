"""
Pytest configuration for Taskflow tests.

Each test gets its own on-disk SQLite database so that several sessions
(one per simulated request) can share it.
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EVENTS_ENABLED", "false")

from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskflow.models import Base, Identity, IdentityRole, Project
from taskflow.services.query_service import TaskQueryService
from taskflow.services.review_service import ReviewService
from taskflow.services.task_service import TaskService
from tests.fakes import RecordingEventEmitter


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Directory fixtures
# ---------------------------------------------------------------------------

@dataclass
class People:
    alice: Identity      # USER, Design
    bob: Identity        # USER, Design
    carol: Identity      # USER, Quality
    dave: Identity       # USER, Finance
    admin: Identity      # ADMIN, Operations
    root: Identity       # SUPER_ADMIN, Operations
    design_project: Project
    finance_project: Project
    internal_project: Project


def make_identity(name: str, department: str | None, role: IdentityRole = IdentityRole.USER) -> Identity:
    return Identity(
        email=f"{name}@example.com",
        display_name=name.title(),
        department=department,
        role=role,
    )


@pytest.fixture
async def people(session_factory) -> People:
    async with session_factory() as session:
        people = People(
            alice=make_identity("alice", "Design"),
            bob=make_identity("bob", " design "),
            carol=make_identity("carol", "Quality"),
            dave=make_identity("dave", "Finance"),
            admin=make_identity("admin", "Operations", IdentityRole.ADMIN),
            root=make_identity("root", "Operations", IdentityRole.SUPER_ADMIN),
            design_project=Project(name="Website Refresh", department="Design"),
            finance_project=Project(name="Quarterly Audit", department="Finance"),
            internal_project=Project(name="Internal Tools", department=None),
        )
        session.add_all(vars(people).values())
        await session.commit()
    return people


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@pytest.fixture
def emitter() -> RecordingEventEmitter:
    return RecordingEventEmitter()


@pytest.fixture
def task_service(db, emitter) -> TaskService:
    return TaskService(db=db, events=emitter)


@pytest.fixture
def review_service(db, emitter) -> ReviewService:
    return ReviewService(db=db, events=emitter)


@pytest.fixture
def query_service(db) -> TaskQueryService:
    return TaskQueryService(db=db)

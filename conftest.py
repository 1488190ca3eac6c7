import os
import tempfile
from pathlib import Path

import pytest

# Configure before training_tracker.config is imported anywhere
_TMP_ROOT = tempfile.mkdtemp(prefix="training_tracker_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_ROOT, 'default.db')}"
os.environ["SEED_DEFAULT_DATA"] = "false"
os.environ["NOTEPAD_DIR"] = os.path.join(_TMP_ROOT, "notepad")
os.environ["AVATAR_DIR"] = os.path.join(_TMP_ROOT, "avatars")

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from training_tracker.config import Config
from training_tracker.database import Base, get_db
from training_tracker.models import progress, topic, user  # noqa: F401
from training_tracker.services.seed import build_default_rows
from training_tracker.services.storage import TrainingStorage

@pytest.fixture()
def db_path(tmp_path):
    path = tmp_path / "training.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path

@pytest.fixture()
def seeded_db_path(db_path):
    sync_engine = create_engine(f"sqlite:///{db_path}")
    with Session(sync_engine) as session:
        session.add_all(build_default_rows())
        session.commit()
    sync_engine.dispose()
    return db_path

def _session_factory(path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

@pytest.fixture()
def session_factory(db_path):
    return _session_factory(db_path)

@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session

@pytest.fixture()
def storage(db):
    return TrainingStorage(db)

@pytest.fixture()
def seeded_session_factory(seeded_db_path):
    return _session_factory(seeded_db_path)

@pytest.fixture()
def avatar_dir():
    # Shared with the /avatars static mount
    return Path(Config.AVATAR_DIR)

@pytest.fixture()
def client(seeded_session_factory, avatar_dir):
    from fastapi.testclient import TestClient
    from training_tracker.main import app

    async def override_get_db():
        async with seeded_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

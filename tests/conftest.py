"""Shared pytest fixtures for test suite"""
import os
import shutil
import sys
import tempfile
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Generator

import pytest

# Add project root to Python path
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ASSETS_ROOT", tempfile.mkdtemp(prefix="tubely-assets-"))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.deps import get_media_tools, get_storage
from app.core.config import Settings, get_settings
from app.core.security import make_jwt
from app.database import Base, get_db
from app.models.video import Video
from app.utils.video_processing import MediaToolError, MediaTools

TEST_JWT_SECRET = "test-secret"

# SQLite in-memory database for testing
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeStorage:
    """Records uploads instead of talking to S3"""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.uploads = []

    def put_object(self, object_key, body, content_type):
        self.uploads.append({
            "key": object_key,
            "body": body.read(),
            "content_type": content_type,
        })
        return self.succeed


class FakeMediaTools(MediaTools):
    """Serves canned dimensions and copies files instead of running ffmpeg"""

    def __init__(self, width: int = 1920, height: int = 1080,
                 fail_inspect: bool = False, fail_remux: bool = False):
        super().__init__()
        self.width = width
        self.height = height
        self.fail_inspect = fail_inspect
        self.fail_remux = fail_remux
        self.seen_paths = []

    def inspect(self, file_path):
        self.seen_paths.append(file_path)
        if self.fail_inspect:
            raise MediaToolError("no streams found in video")
        return self.width, self.height

    def remux(self, file_path):
        if self.fail_remux:
            raise MediaToolError("couldn't execute command")
        output_path = file_path + ".processing"
        shutil.copyfile(file_path, output_path)
        self.seen_paths.append(output_path)
        return output_path


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh SQLite in-memory database session for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        JWT_SECRET=TEST_JWT_SECRET,
        ASSETS_ROOT=str(tmp_path / "assets"),
        S3_BUCKET="test-bucket",
        S3_CF_DISTRIBUTION="cdn.example.com",
    )


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def media() -> FakeMediaTools:
    return FakeMediaTools()


@pytest.fixture(scope="function")
def client(db_session, test_settings, storage, media) -> Generator[TestClient, None, None]:
    """FastAPI test client with test database and fake collaborators"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_media_tools] = lambda: media

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def test_video(db_session, owner_id) -> Video:
    video = Video(user_id=owner_id, title="Boot.dev beats", description="A test video")
    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)
    return video


def auth_headers(user_id: uuid.UUID, secret: str = TEST_JWT_SECRET) -> dict:
    token = make_jwt(user_id, secret, timedelta(hours=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner_id) -> dict:
    return auth_headers(owner_id)


@pytest.fixture
def stranger_headers() -> dict:
    return auth_headers(uuid.uuid4())


@pytest.fixture
def make_headers():
    return auth_headers

"""
Pytest configuration and fixtures for Channel Scout tests.

Provides:
- Async test database with in-memory SQLite shared across stores
- Store fixtures bound to the test database
- Test client for API testing with services bound to the test database
- Factory fixtures for items, profiles and graph snapshots
- Fake enrichment collaborators (media tools, transcriber, topic inferrer)
"""

from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scout.config import AppConfig, Settings
from scout.core.database import get_db
from scout.core.datetime_utils import utc_now
from scout.core.exceptions import NoAudioStreamError, TransientExternalError
from scout.graph.types import GraphInput, ItemStats, TopicMembership
from scout.ingest.base import ChannelProfile, InstagramItem, YouTubeItem
from scout.main import app
from scout.models import Base
from scout.stores.content import ContentStore
from scout.stores.jobs import JobStore
from scout.stores.suggestions import SuggestionStore
from scout.worker.factory import build_services, get_services

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine, as the stores expect."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def job_store(session_factory) -> JobStore:
    return JobStore(session_factory)


@pytest.fixture
def content_store(session_factory) -> ContentStore:
    return ContentStore(session_factory)


@pytest.fixture
def suggestion_store(session_factory) -> SuggestionStore:
    return SuggestionStore(session_factory)


@pytest.fixture
def services(session_factory):
    """Process services wired to the test database (no API keys configured)."""
    config = AppConfig()
    config.settings = Settings(openai_api_key="", youtube_api_key="", apify_api_token="")
    return build_services(config, session_factory)


@pytest_asyncio.fixture
async def client(services, db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with database and services overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_services] = lambda: services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def make_item():
    """Factory for YouTube items belonging to one channel by default."""

    def _make_item(
        video_id: str,
        channel_id: str = "UCchannel",
        title: str | None = None,
        description: str | None = None,
        view_count: int = 1000,
        like_count: int = 50,
        comment_count: int = 5,
        duration_seconds: int | None = 60,
        media_url: str | None = "https://www.youtube.com/watch?v=x",
        display_url: str | None = None,
    ) -> YouTubeItem:
        return YouTubeItem(
            id=f"yt_{video_id}",
            channel_id=channel_id,
            title=title if title is not None else f"Video {video_id}",
            description=description,
            published_at=utc_now() - timedelta(days=1),
            view_count=view_count,
            like_count=like_count,
            comment_count=comment_count,
            duration_seconds=duration_seconds,
            media_url=media_url,
            display_url=display_url,
        )

    return _make_item


@pytest.fixture
def make_reel():
    """Factory for Instagram items."""

    def _make_reel(short_code: str, channel_id: str = "ig_creator", **fields) -> InstagramItem:
        fields.setdefault("title", f"Reel {short_code}")
        return InstagramItem(
            id=f"ig_{short_code}",
            channel_id=channel_id,
            short_code=short_code,
            **fields,
        )

    return _make_reel


@pytest.fixture
def make_profile():
    """Factory for channel profiles."""

    def _make_profile(
        channel_id: str = "UCchannel",
        handle: str = "creator",
        platform: str = "youtube",
        title: str = "Creator",
    ) -> ChannelProfile:
        return ChannelProfile(
            id=channel_id,
            handle=handle,
            platform=platform,
            title=title,
            follower_count=1200,
        )

    return _make_profile


@pytest.fixture
def make_graph_input():
    """
    Factory for graph snapshots.

    Takes {item_id: (channel_id, view_count)} and {topic_name: [item_ids]};
    raw score is the view count when duration and likes are switched off.
    """

    def _make_graph_input(
        items: dict[str, tuple[str, int]],
        topics: dict[str, list[str]],
    ) -> GraphInput:
        return GraphInput(
            items=[
                ItemStats(id=item_id, channel_id=channel_id, title=item_id, view_count=views)
                for item_id, (channel_id, views) in items.items()
            ],
            topics=[
                TopicMembership(topic_id=index, name=name, item_ids=frozenset(ids))
                for index, (name, ids) in enumerate(sorted(topics.items()), 1)
            ],
        )

    return _make_graph_input


# ============================================================================
# Fake enrichment collaborators
# ============================================================================


class FakeMedia:
    """Writes placeholder files into the work directory and records it."""

    def __init__(self, fail_download: set[str] | None = None, no_audio: set[str] | None = None):
        self.fail_download = fail_download or set()
        self.no_audio = no_audio or set()
        self.workdirs: list[Path] = []
        self.downloads: list[str] = []
        self._current = ""

    async def download_media(self, url: str, workdir: Path) -> Path:
        self.workdirs.append(workdir)
        self.downloads.append(url)
        self._current = url
        if url in self.fail_download:
            raise TransientExternalError(f"download failed for {url}")
        path = workdir / "media.mp4"
        path.write_bytes(b"video")
        return path

    async def extract_audio(self, media_path: Path, workdir: Path) -> Path:
        if self._current in self.no_audio:
            raise NoAudioStreamError("no audio stream")
        path = workdir / "audio.mp3"
        path.write_bytes(b"audio")
        return path


class FakeTranscriber:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    async def transcribe(self, audio_path: Path) -> str:
        self.calls += 1
        assert audio_path.exists()
        if self.fail:
            raise TransientExternalError("transcription service unavailable")
        return "today we talk about #Fitness and meal prep"


class FakeInferrer:
    def __init__(self, topics: list[str] | None = None, fail: bool = False):
        self.topics = topics if topics is not None else ["Fitness", "Nutrition"]
        self.fail = fail
        self.calls = 0

    async def infer(self, transcript, title, description, platform) -> list[str]:
        self.calls += 1
        if self.fail:
            raise TransientExternalError("inference failed")
        return list(self.topics)


@pytest.fixture
def fake_media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_inferrer() -> FakeInferrer:
    return FakeInferrer()

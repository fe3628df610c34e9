"""
Pytest Configuration and Fixtures

Shared fixtures for unit tests (mocked session, in-memory Redis double,
ORM row factories) and for integration tests requiring a running stack.
"""

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults - MUST be before any ai_memo imports.
#
# 1. Load .env first so that Docker-matching credentials are available.
# 2. setdefault fills in anything still missing (CI runners, fresh clones
#    without a .env file) so that pydantic Settings validation doesn't crash.
# ---------------------------------------------------------------------------
load_dotenv()  # .env -> os.environ (no-op if file is missing)

_test_env = {
    "POSTGRES_USER": "memo",
    "POSTGRES_PASSWORD": "memo_password",
    "POSTGRES_HOST": "localhost",
    "POSTGRES_PORT": "5432",
    "POSTGRES_DB": "memo_db",
    "SUPABASE_URL": "http://localhost:54321",
    "SUPABASE_ANON_KEY": "eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoiYW5vbiJ9.test-anon",
    "GEMINI_API_KEY": "mock",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import fnmatch  # noqa: E402
import time  # noqa: E402
import uuid  # noqa: E402
from collections.abc import Generator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from ai_memo.core.auth import AuthUser  # noqa: E402
from ai_memo.models import Note, Summary, Tag  # noqa: E402

BASE_URL = os.getenv("MEMO_API_URL", "http://localhost:8000")
USER_ID = "6f1d2c3b-8a47-4e59-9b10-2c3d4e5f6a7b"


# ---------------------------------------------------------------------------
# Unit test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user() -> AuthUser:
    return AuthUser(id=USER_ID, email="tester@example.com")


@pytest.fixture
def session() -> AsyncMock:
    """Stand-in AsyncSession; repositories are patched in handler tests."""
    return AsyncMock()


def make_note(**overrides) -> Note:
    now = datetime.now(UTC)
    values = {
        "id": uuid.uuid4(),
        "user_id": uuid.UUID(USER_ID),
        "title": "회의록",
        "content": "오늘 회의에서 다음 분기 계획을 논의했습니다.",
        "created_at": now,
        "updated_at": now,
        "deleted_at": None,
    }
    values.update(overrides)
    return Note(**values)


def make_summary(note_id: uuid.UUID, **overrides) -> Summary:
    values = {
        "id": uuid.uuid4(),
        "note_id": note_id,
        "user_id": uuid.UUID(USER_ID),
        "summary": "- 다음 분기 계획 논의",
        "model": "gemini-2.0-flash",
        "created_at": datetime.now(UTC),
    }
    values.update(overrides)
    return Summary(**values)


def make_tag(note_id: uuid.UUID, tag: str) -> Tag:
    return Tag(
        id=uuid.uuid4(),
        note_id=note_id,
        user_id=uuid.UUID(USER_ID),
        tag=tag,
        model="gemini-2.0-flash",
        created_at=datetime.now(UTC),
    )


@pytest.fixture
def note_factory():
    """Build detached Note rows owned by the test user."""
    return make_note


@pytest.fixture
def summary_factory():
    return make_summary


@pytest.fixture
def tag_factory():
    return make_tag


class FakePipeline:
    """
    Buffered ``MULTI``/``EXEC`` double: commands queue synchronously and are
    applied together on ``execute()``, with no await point in between.
    """

    def __init__(self, redis: "FakeRedis") -> None:
        self._redis = redis
        self._commands: list[tuple[str, tuple]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._commands.clear()

    def lpush(self, key: str, *values: str) -> "FakePipeline":
        self._commands.append(("lpush", (key, *values)))
        return self

    def ltrim(self, key: str, start: int, end: int) -> "FakePipeline":
        self._commands.append(("ltrim", (key, start, end)))
        return self

    def expire(self, key: str, seconds: int) -> "FakePipeline":
        self._commands.append(("expire", (key, seconds)))
        return self

    async def execute(self) -> list:
        results = [getattr(self._redis, f"_{name}")(*args) for name, args in self._commands]
        self._commands.clear()
        return results


class FakeRedis:
    """
    In-memory double for the subset of ``redis.asyncio.Redis`` used by the
    storage service (string and list commands, transactional pipelines,
    key scans, TTL bookkeeping).
    """

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.ttls: dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        return self.strings.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.strings[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.strings.pop(key, None) is not None:
                removed += 1
            if self.lists.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        values = self.lists.get(key, [])
        return values[start:] if end == -1 else values[start : end + 1]

    async def expire(self, key: str, seconds: int) -> bool:
        return self._expire(key, seconds)

    def _lpush(self, key: str, *values: str) -> int:
        bucket = self.lists.setdefault(key, [])
        for value in values:
            bucket.insert(0, value)
        return len(bucket)

    def _ltrim(self, key: str, start: int, end: int) -> bool:
        if key in self.lists:
            self.lists[key] = self.lists[key][start : end + 1]
        return True

    def _expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def scan_iter(self, match: str | None = None):
        for key in list(self.strings) + list(self.lists):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


# ---------------------------------------------------------------------------
# Integration fixtures (running stack)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def wait_for_api():
    """
    Block until the API is ready or timeout expires.

    Polls /health endpoint with 1s intervals for up to 30s.
    Fails the test session if API is unreachable (Docker likely not running).
    """
    url = f"{BASE_URL}/health"
    timeout = 30
    start = time.time()

    print("\n[Test] Waiting for API...")
    while time.time() - start < timeout:
        try:
            res = httpx.get(url, timeout=1.0)
            if res.status_code == 200:
                print("API Ready")
                return
        except httpx.RequestError:
            time.sleep(1)

    pytest.fail("API unreachable. Docker is likely down.")


@pytest.fixture(scope="session")
def api_client(wait_for_api) -> Generator[httpx.Client, None, None]:
    """
    Pre-configured HTTP client for integration tests.

    Authenticates with MEMO_ACCESS_TOKEN when set (tests that need a user
    are skipped otherwise). Base URL points to /api/v1.
    """
    token = os.getenv("MEMO_ACCESS_TOKEN")
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    with httpx.Client(
        base_url=f"{BASE_URL}/api/v1", headers=headers, timeout=30.0
    ) as client:
        yield client

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time; point them at a throwaway SQLite file
_TMP_DIR = Path(tempfile.mkdtemp(prefix="correlativos-tests-"))
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_TMP_DIR / 'app.db'}")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DB_RETRY_BASE_DELAY", "0")
os.environ.setdefault("DB_RETRY_JITTER", "0")

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Add the backend directory so `correlativos` package imports resolve during tests
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.append(str(BACKEND_DIR))

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from correlativos.core.db import get_session, make_engine  # noqa: E402
from correlativos.core.deps import get_current_year  # noqa: E402
from correlativos.models import ActivityType, Base  # noqa: E402

ACTIVITY_TYPES = [
    {"id": 3, "nombre": "Informe policial", "sigla_informe": "INF", "requiere_informe": True},
    {"id": 4, "nombre": "Oficio", "sigla_informe": "OFI", "requiere_informe": True},
    {"id": 5, "nombre": "Diligencia", "sigla_informe": None, "requiere_informe": False},
    {"id": 6, "nombre": "Análisis", "sigla_informe": "   ", "requiere_informe": True},
]


class DummyOrig(Exception):
    """Stand-in for a DBAPI exception carrying a vendor error code."""

    def __init__(self, code: int, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.args = (code, message)


class FixedClock:
    def __init__(self, year: int):
        self.year = year

    def __call__(self) -> int:
        return self.year


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'correlativos.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all([ActivityType(**row) for row in ACTIVITY_TYPES])
        await session.commit()
    yield factory
    await engine.dispose()


@pytest.fixture
def clock():
    return FixedClock(2025)


@pytest.fixture
async def client(session_factory, clock):
    from correlativos.main import app

    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_current_year] = clock
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()

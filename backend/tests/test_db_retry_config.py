import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from correlativos.core.config import settings
from correlativos.core.db_retry import SequenceContention, is_retriable_error, with_db_retry

from conftest import DummyOrig


class DummySession:
    def __init__(self):
        self.rollback_calls = 0

    async def rollback(self):
        self.rollback_calls += 1


@pytest.mark.anyio
async def test_db_retry_respects_config(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "DB_RETRY_BASE_DELAY", 0.0)
    monkeypatch.setattr(settings, "DB_RETRY_JITTER", 0.0)

    session = DummySession()
    calls = {"count": 0}

    async def flaky_operation():
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("stmt", {}, DummyOrig(1213, "deadlock"))
        return "ok"

    result = await with_db_retry(session, flaky_operation)

    assert result == "ok"
    assert calls["count"] == 2
    assert session.rollback_calls == 1


@pytest.mark.anyio
async def test_exhausted_retries_reraise_last_error(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 3)

    session = DummySession()
    calls = {"count": 0}

    async def always_contended():
        calls["count"] += 1
        raise SequenceContention("counter insert race")

    with pytest.raises(SequenceContention):
        await with_db_retry(session, always_contended, base_delay=0.0, jitter=0.0)

    assert calls["count"] == 3
    assert session.rollback_calls == 3


@pytest.mark.anyio
async def test_connection_failure_not_retried(monkeypatch):
    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 3)

    session = DummySession()
    calls = {"count": 0}

    async def unreachable():
        calls["count"] += 1
        raise OperationalError("stmt", {}, DummyOrig(2003, "Can't connect to MySQL server"))

    with pytest.raises(OperationalError):
        await with_db_retry(session, unreachable)

    assert calls["count"] == 1
    assert session.rollback_calls == 0


@pytest.mark.parametrize(
    "orig",
    [
        DummyOrig(1205, "Lock wait timeout exceeded"),
        DummyOrig(0, "could not serialize access", sqlstate="40001"),
        DummyOrig(0, "deadlock detected", sqlstate="40P01"),
        DummyOrig(5, "database is locked"),
    ],
)
def test_retriable_classification(orig):
    assert is_retriable_error(OperationalError("stmt", {}, orig))


def test_integrity_errors_are_not_retriable_on_their_own():
    exc = IntegrityError("stmt", {}, DummyOrig(1062, "Duplicate entry"))
    assert not is_retriable_error(exc)
    assert not is_retriable_error(ValueError("nope"))

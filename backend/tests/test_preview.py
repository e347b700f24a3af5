import pytest
from sqlalchemy import func, select

from correlativos.models import CorrelativeCounter, IssuanceRecord
from correlativos.services.allocator import allocate_correlative
from correlativos.services.preview import preview_correlative
from correlativos.services.results import CorrelativeErrorKind


async def _preview(session_factory, activity_type_id=3, year=2025):
    async with session_factory() as session:
        return await preview_correlative(session, activity_type_id, year)


@pytest.mark.anyio
async def test_preview_without_counter_starts_at_one(session_factory):
    result = await _preview(session_factory)

    assert result.ok
    preview = result.value
    assert preview.current_number == 0
    assert preview.next_number == 1
    assert preview.sigla == "INF"
    assert preview.code == "INF-001"
    assert preview.year == 2025


@pytest.mark.anyio
async def test_preview_is_read_only_and_repeatable(session_factory):
    first = await _preview(session_factory)
    second = await _preview(session_factory)

    assert first.value == second.value
    async with session_factory() as session:
        assert await session.scalar(select(func.count()).select_from(CorrelativeCounter)) == 0
        assert await session.scalar(select(func.count()).select_from(IssuanceRecord)) == 0


@pytest.mark.anyio
async def test_preview_follows_allocations(session_factory):
    async with session_factory() as session:
        for user in (1, 2, 3):
            await allocate_correlative(session, 3, 2025, user)

        result = await preview_correlative(session, 3, 2025)

    assert result.value.current_number == 3
    assert result.value.next_number == 4
    assert result.value.code == "INF-004"


@pytest.mark.anyio
async def test_preview_does_not_carry_previous_year(session_factory):
    async with session_factory() as session:
        for _ in range(5):
            await allocate_correlative(session, 3, 2025, 1)

    result = await _preview(session_factory, year=2026)

    assert result.value.current_number == 0
    assert result.value.next_number == 1
    assert result.value.code == "INF-001"
    assert result.value.year == 2026


@pytest.mark.anyio
async def test_preview_unknown_type(session_factory):
    result = await _preview(session_factory, activity_type_id=404)

    assert result.error is CorrelativeErrorKind.NOT_FOUND


@pytest.mark.anyio
async def test_preview_type_without_sigla(session_factory):
    result = await _preview(session_factory, activity_type_id=5)

    assert result.error is CorrelativeErrorKind.INVALID_CONFIGURATION
    assert "sigla" in result.message

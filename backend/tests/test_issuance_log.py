import pytest
from sqlalchemy import update

from correlativos.models import CorrelativeCounter
from correlativos.services.allocator import allocate_correlative
from correlativos.services.issuance_log import list_issuances, verify_counter_integrity


async def _seed(session_factory):
    async with session_factory() as session:
        for _ in range(3):
            await allocate_correlative(session, 3, 2025, 10)
        for _ in range(2):
            await allocate_correlative(session, 4, 2025, 11)
        await allocate_correlative(session, 3, 2024, 12)


@pytest.mark.anyio
async def test_list_issuances_filters_by_year_and_type(session_factory):
    await _seed(session_factory)

    async with session_factory() as session:
        rows, total = await list_issuances(session, year=2025, activity_type_id=3)

    assert total == 3
    assert [record.code for record, _, _ in rows] == ["INF-003", "INF-002", "INF-001"]
    assert {(nombre, sigla) for _, nombre, sigla in rows} == {("Informe policial", "INF")}


@pytest.mark.anyio
async def test_list_issuances_paginates(session_factory):
    await _seed(session_factory)

    async with session_factory() as session:
        page_one, total = await list_issuances(session, year=2025, limit=2, offset=0)
        page_three, _ = await list_issuances(session, year=2025, limit=2, offset=4)

    assert total == 5
    assert len(page_one) == 2
    assert len(page_three) == 1


@pytest.mark.anyio
async def test_list_issuances_other_year_is_separate(session_factory):
    await _seed(session_factory)

    async with session_factory() as session:
        rows, total = await list_issuances(session, year=2024)

    assert total == 1
    assert rows[0][0].code == "INF-001"
    assert rows[0][0].issued_by == 12


@pytest.mark.anyio
async def test_verify_counter_integrity_reports_drift(session_factory):
    await _seed(session_factory)

    async with session_factory() as session:
        assert await verify_counter_integrity(session) == []

        await session.execute(
            update(CorrelativeCounter)
            .where(CorrelativeCounter.activity_type_id == 4, CorrelativeCounter.year == 2025)
            .values(last_number=5)
        )
        await session.commit()

        problems = await verify_counter_integrity(session)
        scoped = await verify_counter_integrity(session, activity_type_id=3)

    assert len(problems) == 1
    drift = problems[0]
    assert (drift.activity_type_id, drift.year) == (4, 2025)
    assert drift.last_number == 5
    assert drift.record_count == 2
    assert drift.max_number == 2
    assert scoped == []

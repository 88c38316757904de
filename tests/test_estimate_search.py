"""
Keyword matching, paging, projection and date parsing for estimate search.
"""
import unittest
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event

from services.estimate_search import SEARCH_TYPES, parse_date, project, search_estimates, word_condition
from tests.fakes import make_estimate


def _ids(result):
    return {e["id"] for e in result["estimates"]}


@pytest.fixture
def gaming_pc():
    return make_estimate(
        name="김철수",
        phone="010-1111-2222",
        table_data=[
            {"productName": "RTX 4070 SUPER", "productCode": "G-4070S", "distributor": "대원", "remarks": ""},
            {"productName": "DDR5 32GB", "productCode": "M-32", "distributor": "서린", "remarks": "재고확인"},
        ],
        notes="배송 전 연락",
        description="게임용 견적",
    )


@pytest.fixture
def office_pc():
    return make_estimate(
        name="이영희",
        phone="010-5555-6666",
        table_data=[{"productName": "i3-12100", "productCode": "C-12100", "distributor": "코잇"}],
        notes="50%_할인 적용",
    )


@pytest.mark.asyncio
async def test_all_words_must_match(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        assert _ids(await search_estimates(db, keyword="김철수 rtx")) == {gaming_pc.id}
        assert _ids(await search_estimates(db, keyword="김철수 radeon")) == set()


@pytest.mark.asyncio
async def test_words_may_match_different_fields(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        assert _ids(await search_estimates(db, keyword="2222 서린 게임용")) == {gaming_pc.id}


@pytest.mark.asyncio
async def test_case_insensitive_single_field(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        assert _ids(await search_estimates(db, keyword="super", search_type="productName")) == {gaming_pc.id}
        assert _ids(await search_estimates(db, keyword="대원", search_type="distributor")) == {gaming_pc.id}
        assert _ids(await search_estimates(db, keyword="대원", search_type="name")) == set()
        assert _ids(await search_estimates(db, keyword="연락", search_type="notes")) == {gaming_pc.id}


@pytest.mark.asyncio
async def test_line_item_keys_are_not_searched(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        assert _ids(await search_estimates(db, keyword="productname")) == set()


@pytest.mark.asyncio
async def test_wildcard_characters_match_literally(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        assert _ids(await search_estimates(db, keyword="%_할인")) == {office_pc.id}
        assert _ids(await search_estimates(db, keyword="m_32")) == set()
        assert _ids(await search_estimates(db, keyword="%")) == {office_pc.id}


@pytest.mark.asyncio
async def test_no_keyword_returns_everything(session_factory, seed, gaming_pc, office_pc):
    await seed(gaming_pc, office_pc)
    async with session_factory() as db:
        result = await search_estimates(db)
    assert _ids(result) == {gaming_pc.id, office_pc.id}
    assert result["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_page_is_limited_in_the_query(session_factory, seed):
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    await seed(*[make_estimate(name=f"고객{i}", created_at=base + timedelta(minutes=i)) for i in range(30)])
    statements = []

    async with session_factory() as db:
        engine = db.get_bind()

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", capture)
        try:
            result = await search_estimates(db, page=2, limit=1)
        finally:
            event.remove(engine, "before_cursor_execute", capture)

    assert [e["customerInfo"]["name"] for e in result["estimates"]] == ["고객28"]
    assert result["pagination"] == {"total": 30, "page": 2, "limit": 1, "totalPages": 30}
    row_queries = [s for s in statements if "count(" not in s.lower()]
    assert row_queries and all("LIMIT" in s.upper() for s in row_queries)


class TestWordCondition(unittest.TestCase):
    def test_every_search_type_builds(self):
        for search_type in SEARCH_TYPES:
            self.assertIsNotNone(word_condition("rtx", search_type))

    def test_unknown_search_type(self):
        with self.assertRaises(ValueError):
            word_condition("rtx", "price")


class TestProjection(unittest.TestCase):
    def test_base_fields(self):
        estimate = make_estimate(name="이영희", is_contractor=True)
        out = project(estimate)
        self.assertEqual(out["customerInfo"]["name"], "이영희")
        self.assertTrue(out["isContractor"])
        self.assertNotIn("tableData", out)
        self.assertNotIn("notes", out)

    def test_line_item_search_includes_matching_rows(self):
        estimate = make_estimate(
            table_data=[{"productName": "A", "productCode": "X-1"}, {"productName": "B", "productCode": "Y-2"}]
        )
        out = project(estimate, "productCode", ["y-"])
        self.assertEqual(out["tableData"], [{"productName": "B", "productCode": "Y-2"}])

    def test_notes_search_includes_notes(self):
        estimate = make_estimate(notes="현장 설치")
        self.assertEqual(project(estimate, "notes")["notes"], "현장 설치")


class TestParseDate(unittest.TestCase):
    def test_date_only_bounds(self):
        self.assertEqual(parse_date("2024-03-01"), datetime(2024, 3, 1, tzinfo=timezone.utc))
        end = parse_date("2024-03-01", end_of_day=True)
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))

    def test_iso_datetime(self):
        self.assertEqual(parse_date("2024-03-01T09:00:00Z"), datetime(2024, 3, 1, 9, tzinfo=timezone.utc))

    def test_empty_and_invalid(self):
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date(""))
        with self.assertRaises(ValueError):
            parse_date("2024-13-45")


if __name__ == "__main__":
    unittest.main()

"""
FieldMerch Backend: Competitor Facings Tests
==============================================

What:  Tests for competitor batch creation and the combined listing.

What we test:
    ✅ A competitor batch shares one batch id and one report date
    ✅ The same ordered checks as own batches (user, store, ownership, fields)
    ✅ Unknown brand/product is NotFound; a product of another brand is rejected
    ✅ The combined listing tags each row with its source, newest first
"""

import pytest
from unittest.mock import AsyncMock

from fieldmerch.exceptions import (
    AuthenticationError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from fieldmerch.services.batch_query_service import BatchQueryService
from fieldmerch.services.batch_service import BatchService, batch_service

from helpers import (
    auth_headers,
    count_competitor_facings,
    count_facings,
    facing_row,
    fetch_competitor_facings,
    make_competitor_entry,
    make_entry,
    utc,
)


class TestCreateCompetitorBatch:
    """Tests for create_competitor_batch."""

    def setup_method(self):
        self.service = BatchService()

    @pytest.mark.asyncio
    async def test_rows_share_one_batch(self, db_session, directory, employee):
        entries = [
            make_competitor_entry(competitor_id=1, competitor_product_id=1),
            make_competitor_entry(competitor_id=2, competitor_product_id=2, facings_count=0),
        ]

        result = await self.service.create_competitor_batch(db_session, employee, entries)

        assert result.affected_rows == 2
        assert result.message == "Competitor facings batch added successfully!"
        rows = await fetch_competitor_facings(db_session, result.batch_id)
        assert [row.competitor_id for row in rows] == [1, 2]
        assert len({row.report_date for row in rows}) == 1
        assert await count_facings(db_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_id", [None, ""])
    async def test_brand_level_count(self, db_session, directory, employee, product_id):
        entry = make_competitor_entry(competitor_product_id=product_id)

        result = await self.service.create_competitor_batch(db_session, employee, [entry])

        rows = await fetch_competitor_facings(db_session, result.batch_id)
        assert rows[0].competitor_product_id is None

    @pytest.mark.asyncio
    async def test_impersonation_is_forbidden(self, db_session, directory, employee):
        with pytest.raises(PermissionDeniedError):
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(), make_competitor_entry(user_id=2)]
            )

        assert await count_competitor_facings(db_session) == 0

    @pytest.mark.asyncio
    async def test_foreign_store_is_forbidden(self, db_session, directory, employee):
        with pytest.raises(PermissionDeniedError):
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(store_id=directory["foreign_store"])]
            )

    @pytest.mark.asyncio
    async def test_admin_may_use_any_store(self, db_session, directory, admin):
        result = await self.service.create_competitor_batch(
            db_session, admin, [make_competitor_entry(user_id=3, store_id=directory["foreign_store"])]
        )

        assert result.affected_rows == 1

    @pytest.mark.asyncio
    async def test_unknown_store_is_not_found(self, db_session, directory, employee):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(store_id=999)]
            )

        assert exc_info.value.context["resource"] == "store"

    @pytest.mark.asyncio
    async def test_unknown_brand_is_not_found(self, db_session, directory, employee):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(competitor_id=99)]
            )

        assert exc_info.value.context["resource"] == "competitor brand"

    @pytest.mark.asyncio
    async def test_unknown_product_is_not_found(self, db_session, directory, employee):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(competitor_product_id=99)]
            )

        assert exc_info.value.context["resource"] == "competitor product"

    @pytest.mark.asyncio
    async def test_product_of_other_brand_is_rejected(self, db_session, directory, employee):
        """Maggi Noodles cannot be counted under Knorr."""
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_competitor_batch(
                db_session, employee,
                [make_competitor_entry(competitor_id=1, competitor_product_id=2)],
            )

        assert exc_info.value.field == "competitor_product_id"
        assert await count_competitor_facings(db_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["competitor_id", "category", "facings_count"])
    async def test_missing_field_is_rejected(self, db_session, directory, employee, field):
        entry = make_competitor_entry()
        del entry[field]

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_competitor_batch(db_session, employee, [entry])

        assert exc_info.value.field == field

    @pytest.mark.asyncio
    async def test_long_category_is_rejected(self, db_session, directory, employee):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(category="x" * 51)]
            )

        assert exc_info.value.field == "category"

    @pytest.mark.asyncio
    async def test_negative_count_is_rejected(self, db_session, directory, employee):
        with pytest.raises(ValidationError):
            await self.service.create_competitor_batch(
                db_session, employee, [make_competitor_entry(facings_count=-1)]
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], None, {"competitor_id": 1}])
    async def test_empty_or_non_array_body_is_rejected(self, db_session, employee, body):
        with pytest.raises(ValidationError):
            await self.service.create_competitor_batch(db_session, employee, body)

    @pytest.mark.asyncio
    async def test_missing_caller_is_unauthenticated(self, db_session):
        with pytest.raises(AuthenticationError):
            await self.service.create_competitor_batch(db_session, None, [make_competitor_entry()])


class TestFacingsWithCompetitors:
    """Tests for list_facings_with_competitors."""

    def setup_method(self):
        self.service = BatchQueryService()

    @pytest.mark.asyncio
    async def test_empty(self, db_session, directory):
        assert await self.service.list_facings_with_competitors(db_session) == []

    @pytest.mark.asyncio
    async def test_combines_both_tables(self, db_session, directory, employee):
        own = await batch_service.create_batch(db_session, employee, [make_entry(product_id=3)])
        rival = await batch_service.create_competitor_batch(
            db_session, employee,
            [make_competitor_entry(), make_competitor_entry(competitor_id=2, competitor_product_id=None)],
        )

        rows = await self.service.list_facings_with_competitors(db_session)

        assert len(rows) == 3
        by_source = {}
        for row in rows:
            by_source.setdefault(row.source, []).append(row)

        [own_row] = by_source["podravka"]
        assert own_row.batch_id == own.batch_id
        assert own_row.product_name == "Podravka Pasta"
        assert own_row.brand is None
        assert own_row.store_name == "Konzum Centar"

        competitor_rows = by_source["competitor"]
        assert {row.batch_id for row in competitor_rows} == {rival.batch_id}
        assert {(row.brand, row.product_name) for row in competitor_rows} == {
            ("Knorr", "Knorr Spaghetti"),
            ("Maggi", None),
        }

    @pytest.mark.asyncio
    async def test_ordered_newest_first(self, db_session, directory, employee):
        db_session.add(facing_row(1, 1, 3, "own-old", utc(2024, 1, 1)))
        await db_session.flush()
        await batch_service.create_competitor_batch(db_session, employee, [make_competitor_entry()])

        rows = await self.service.list_facings_with_competitors(db_session)

        assert [row.source for row in rows] == ["competitor", "podravka"]

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("connection lost"))

        with pytest.raises(DatabaseError):
            await self.service.list_facings_with_competitors(mock_db_session)


class TestCompetitorRoutes:
    """POST /competitor-facing/batch and GET /with-competitors"""

    @pytest.mark.asyncio
    async def test_create_returns_201(self, test_client):
        response = await test_client.post(
            "/competitor-facing/batch",
            json={"facings": [make_competitor_entry()]},
            headers=auth_headers(),
        )

        assert response.status_code == 201
        assert response.json()["affectedRows"] == 1
        assert len(response.json()["batchId"]) == 36

    @pytest.mark.asyncio
    async def test_unknown_brand_is_404(self, test_client):
        response = await test_client.post(
            "/competitor-facing/batch",
            json=[make_competitor_entry(competitor_id=99)],
            headers=auth_headers(),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_no_identity_is_401(self, test_client):
        response = await test_client.post("/competitor-facing/batch", json=[make_competitor_entry()])

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_with_competitors_lists_both(self, test_client):
        await test_client.post(
            "/podravka-facing/batch", json=[make_entry()], headers=auth_headers()
        )
        await test_client.post(
            "/competitor-facing/batch", json=[make_competitor_entry()], headers=auth_headers()
        )

        response = await test_client.get("/with-competitors", headers=auth_headers())

        assert response.status_code == 200
        assert sorted(row["source"] for row in response.json()) == ["competitor", "podravka"]

    @pytest.mark.asyncio
    async def test_with_competitors_requires_role(self, test_client):
        response = await test_client.get("/with-competitors", headers=auth_headers(1, "guest"))

        assert response.status_code == 403

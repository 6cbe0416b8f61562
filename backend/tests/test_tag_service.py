"""
Tests for TagService and the tag payload rules.
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock

from rentok.exceptions import ConflictError, NotFoundError, ValidationError
from rentok.models.tag import Tag
from rentok.schemas.tag import TagWrite
from rentok.services.tag_service import TagService, check_tag_payload, generate_slug

NOW = datetime(2025, 6, 15, tzinfo=timezone.utc)


def make_tag(**overrides) -> Tag:
    values = dict(
        tag_id=uuid.uuid4(),
        name="Wedding",
        slug="wedding",
        description=None,
        image_url=None,
        color="#9A2143",
        is_active=True,
        sort_order=0,
        usage_count=3,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return Tag(**values)


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


class TestGenerateSlug:

    @pytest.mark.parametrize(
        "name,slug",
        [
            ("Summer Wear!", "summer-wear"),
            ("A  --  B", "a-b"),
            ("  Lehenga & Sherwani ", "lehenga-sherwani"),
            ("Kids' Party 2025", "kids-party-2025"),
        ],
    )
    def test_slug(self, name, slug):
        assert generate_slug(name) == slug


class TestCheckTagPayload:

    def test_name_required(self):
        with pytest.raises(ValidationError) as exc:
            check_tag_payload(TagWrite(name="   "))
        assert exc.value.message == "Tag name is required"

    def test_name_length(self):
        with pytest.raises(ValidationError) as exc:
            check_tag_payload(TagWrite(name="x"))
        assert exc.value.message == "Tag name must be between 2 and 100 characters"

        with pytest.raises(ValidationError):
            check_tag_payload(TagWrite(name="x" * 101))

    def test_color_format(self):
        with pytest.raises(ValidationError) as exc:
            check_tag_payload(TagWrite(name="Festive", color="red"))
        assert exc.value.message == "Invalid color format. Use hex format like #9A2143"

    def test_negative_sort_order(self):
        with pytest.raises(ValidationError) as exc:
            check_tag_payload(TagWrite(name="Festive", sort_order=-1))
        assert exc.value.message == "Sort order cannot be negative"

    def test_defaults(self):
        values = check_tag_payload(TagWrite(name="  Festive Wear ", description="  "))
        assert values["name"] == "Festive Wear"
        assert values["slug"] == "festive-wear"
        assert values["description"] is None
        assert values["color"] == "#9A2143"
        assert values["is_active"] is True
        assert values["sort_order"] == 0


class TestTagService:

    def setup_method(self):
        self.service = TagService()

    @pytest.mark.asyncio
    async def test_create_tag(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        tag = await self.service.create_tag(
            mock_db_session, TagWrite(name="Festive", color="#00FF00"), now=NOW
        )

        assert tag.slug == "festive"
        assert tag.color == "#00FF00"
        assert tag.usage_count == 0
        mock_db_session.add.assert_called_once_with(tag)

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(uuid.uuid4())

        with pytest.raises(ConflictError) as exc:
            await self.service.create_tag(mock_db_session, TagWrite(name="Festive"))
        assert exc.value.message == "Tag name already exists"

    @pytest.mark.asyncio
    async def test_create_slug_conflict(self, mock_db_session):
        mock_db_session.execute.side_effect = [scalar_result(None), scalar_result(uuid.uuid4())]

        with pytest.raises(ConflictError) as exc:
            await self.service.create_tag(mock_db_session, TagWrite(name="Festive!"))
        assert exc.value.message == "A tag with this name already exists (slug conflict)"

    @pytest.mark.asyncio
    async def test_get_missing_tag(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError) as exc:
            await self.service.get_tag(mock_db_session, uuid.uuid4())
        assert exc.value.message == "Tag not found"

    @pytest.mark.asyncio
    async def test_update_regenerates_slug(self, mock_db_session):
        tag = make_tag()
        mock_db_session.execute.return_value = scalar_result(None)
        mock_db_session.get.return_value = tag

        updated = await self.service.update_tag(
            mock_db_session, tag.tag_id, TagWrite(name="Wedding Season"), now=NOW
        )

        assert updated.slug == "wedding-season"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_tag_in_use(self, mock_db_session):
        product_id = uuid.uuid4()
        mock_db_session.execute.return_value = rows_result(
            [SimpleNamespace(product_id=product_id, title="Red Lehenga")]
        )

        with pytest.raises(ConflictError) as exc:
            await self.service.delete_tag(mock_db_session, uuid.uuid4())

        assert exc.value.message == "Cannot delete tag. It is currently being used by products."
        assert exc.value.payload == {
            "products": [{"product_id": str(product_id), "title": "Red Lehenga"}]
        }
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_delete_unused_tag(self, mock_db_session):
        mock_db_session.execute.return_value = rows_result([])

        await self.service.delete_tag(mock_db_session, uuid.uuid4())

        assert mock_db_session.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_list_active_tags(self, mock_db_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = [make_tag(), make_tag(name="Party", slug="party")]
        mock_db_session.execute.return_value = result

        tags = await self.service.list_active_tags(mock_db_session, limit=0)

        assert [t.slug for t in tags] == ["wedding", "party"]

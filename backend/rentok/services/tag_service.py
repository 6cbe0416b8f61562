"""
RentOK Admin Backend — Tag Service
===================================

What:  CRUD for product tags, the active-tag picker feed, and slug generation.
Who:   Called by the /api/tags route handlers.

Slug rules:
    "Summer Wear!"  → "summer-wear"
    "A  --  B"      → "a-b"
    lower-case, drop anything outside [a-z0-9 whitespace -], whitespace runs
    become "-", runs of "-" collapse to one.

A tag cannot be deleted while any product still lists it in `products.tags`;
the 409 response carries the offending products.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from rentok.models.catalog import Product
from rentok.models.tag import DEFAULT_TAG_COLOR, Tag
from rentok.schemas.common import Pagination
from rentok.schemas.tag import (
    ActiveTag,
    TaggedProduct,
    TagListResponse,
    TagResponse,
    TagWrite,
)

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACES = re.compile(r"\s+")
_SLUG_DASHES = re.compile(r"-+")

SORT_ORDERINGS = {
    "name": asc(Tag.name),
    "usage_count": desc(Tag.usage_count),
    "created_at": desc(Tag.created_at),
    "sort_order": asc(Tag.sort_order),
}


def generate_slug(name: str) -> str:
    slug = _SLUG_STRIP.sub("", name.strip().lower())
    slug = _SLUG_SPACES.sub("-", slug)
    return _SLUG_DASHES.sub("-", slug)


def check_tag_payload(payload: TagWrite) -> dict:
    """
    Validate a create/update body and return the column values to write.

    Raises:
        ValidationError: blank name, name length outside 2-100, bad color,
                         negative sort_order
    """
    if not payload.name or not payload.name.strip():
        raise ValidationError("Tag name is required", field="name")

    name = payload.name.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError("Tag name must be between 2 and 100 characters", field="name")
    if payload.color and not COLOR_PATTERN.match(payload.color):
        raise ValidationError(
            f"Invalid color format. Use hex format like {DEFAULT_TAG_COLOR}", field="color"
        )
    if payload.sort_order is not None and payload.sort_order < 0:
        raise ValidationError("Sort order cannot be negative", field="sort_order")

    description = payload.description.strip() if payload.description else None
    return {
        "name": name,
        "slug": generate_slug(name),
        "description": description or None,
        "image_url": payload.image_url or None,
        "color": payload.color or DEFAULT_TAG_COLOR,
        "is_active": True if payload.is_active is None else payload.is_active,
        "sort_order": payload.sort_order or 0,
    }


class TagService:
    """Business logic for tags. Stateless; one instance is shared."""

    async def list_tags(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        status: str = "",
        sort_by: str = "sort_order",
        active_only: bool = False,
    ) -> TagListResponse:
        filters = []
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(
                    Tag.name.ilike(pattern),
                    Tag.description.ilike(pattern),
                    Tag.slug.ilike(pattern),
                )
            )
        if status == "active" or active_only:
            filters.append(Tag.is_active.is_(True))
        elif status == "inactive":
            filters.append(Tag.is_active.is_(False))

        ordering = SORT_ORDERINGS.get(sort_by, SORT_ORDERINGS["sort_order"])
        try:
            result = await db.execute(
                select(Tag)
                .where(*filters)
                .order_by(ordering)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            tags = list(result.scalars().all())
            count_result = await db.execute(select(func.count(Tag.tag_id)).where(*filters))
            total = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing tags: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_tags"})

        return TagListResponse(
            tags=[TagResponse.model_validate(t) for t in tags],
            pagination=Pagination.build(page=page, limit=limit, total=total),
        )

    async def list_active_tags(
        self, db: AsyncSession, search: str = "", limit: int = 50
    ) -> List[ActiveTag]:
        """Active tags in picker order. A limit of 0 or less returns all of them."""
        query = select(Tag).where(Tag.is_active.is_(True)).order_by(asc(Tag.sort_order))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Tag.name.ilike(pattern), Tag.description.ilike(pattern)))
        if limit > 0:
            query = query.limit(limit)
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing active tags: %s", str(e))
            raise DatabaseError(context={"operation": "list_active_tags"})
        return [ActiveTag.model_validate(t) for t in result.scalars().all()]

    async def get_tag(self, db: AsyncSession, tag_id: UUID) -> Tag:
        try:
            tag = await db.get(Tag, tag_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching tag %s: %s", tag_id, str(e))
            raise DatabaseError(context={"tag_id": str(tag_id)})
        if tag is None:
            raise NotFoundError(resource="Tag", resource_id=str(tag_id))
        return tag

    async def _ensure_unique(
        self, db: AsyncSession, name: str, slug: str, exclude_id: Optional[UUID] = None
    ) -> None:
        """Name is checked before slug so the more specific message wins."""
        checks = (
            (Tag.name == name, "Tag name already exists"),
            (Tag.slug == slug, "A tag with this name already exists (slug conflict)"),
        )
        for condition, message in checks:
            query = select(Tag.tag_id).where(condition)
            if exclude_id is not None:
                query = query.where(Tag.tag_id != exclude_id)
            result = await db.execute(query.limit(1))
            if result.scalar_one_or_none() is not None:
                raise ConflictError(message, context={"name": name, "slug": slug})

    async def create_tag(
        self, db: AsyncSession, payload: TagWrite, now: Optional[datetime] = None
    ) -> Tag:
        values = check_tag_payload(payload)
        await self._ensure_unique(db, values["name"], values["slug"])

        now = now or datetime.now(timezone.utc)
        tag = Tag(**values, usage_count=0, created_at=now, updated_at=now)
        try:
            db.add(tag)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating tag %s: %s", values["name"], str(e))
            raise DatabaseError(context={"operation": "create_tag"})

        logger.info("Tag created: %s (slug=%s)", tag.name, tag.slug)
        return tag

    async def update_tag(
        self,
        db: AsyncSession,
        tag_id: UUID,
        payload: TagWrite,
        now: Optional[datetime] = None,
    ) -> Tag:
        values = check_tag_payload(payload)
        await self._ensure_unique(db, values["name"], values["slug"], exclude_id=tag_id)
        tag = await self.get_tag(db, tag_id)

        for key, value in values.items():
            setattr(tag, key, value)
        tag.updated_at = now or datetime.now(timezone.utc)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating tag %s: %s", tag_id, str(e))
            raise DatabaseError(context={"tag_id": str(tag_id)})

        logger.info("Tag updated: %s", tag_id)
        return tag

    async def delete_tag(self, db: AsyncSession, tag_id: UUID) -> None:
        """
        Raises:
            ConflictError: at least one product still references the tag;
                           `payload["products"]` lists it
        """
        try:
            result = await db.execute(
                select(Product.product_id, Product.title)
                .where(Product.tags.contains([str(tag_id)]))
                .limit(1)
            )
            in_use = [TaggedProduct.model_validate(row) for row in result.all()]
        except SQLAlchemyError as e:
            logger.error("Database error checking usage of tag %s: %s", tag_id, str(e))
            raise DatabaseError(message="Failed to check tag usage")

        if in_use:
            raise ConflictError(
                "Cannot delete tag. It is currently being used by products.",
                payload={"products": [p.model_dump(mode="json") for p in in_use]},
            )

        try:
            await db.execute(delete(Tag).where(Tag.tag_id == tag_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting tag %s: %s", tag_id, str(e))
            raise DatabaseError(context={"tag_id": str(tag_id)})
        logger.info("Tag deleted: %s", tag_id)


# ── Singleton Instance ────────────────────────────────────────────────────
tag_service = TagService()

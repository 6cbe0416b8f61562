"""
RentOK Admin Backend — Tag Route Handlers
==========================================

What:  /api/tags: admin CRUD and the active-tag feed used by product forms.

GET /tags/active is registered before /tags/{tag_id}.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.database import get_db_session
from rentok.schemas.common import ErrorResponse, MessageResponse
from rentok.schemas.tag import (
    ActiveTagListResponse,
    TagEnvelope,
    TagListResponse,
    TagMutationResponse,
    TagResponse,
    TagWrite,
)
from rentok.services.tag_service import tag_service

router = APIRouter(prefix="/api", tags=["Tags"])


@router.get("/tags", response_model=TagListResponse, summary="List tags")
async def list_tags(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default="", description="Matches name, description or slug"),
    status: str = Query(default="", description="active or inactive"),
    sort_by: str = Query(
        default="sort_order",
        alias="sortBy",
        description="name, usage_count, created_at or sort_order",
    ),
    active_only: bool = Query(default=False, alias="activeOnly"),
    db: AsyncSession = Depends(get_db_session),
) -> TagListResponse:
    return await tag_service.list_tags(
        db=db,
        page=page,
        limit=limit,
        search=search,
        status=status,
        sort_by=sort_by,
        active_only=active_only,
    )


@router.post(
    "/tags",
    response_model=TagMutationResponse,
    status_code=201,
    responses={
        400: {"description": "Invalid tag", "model": ErrorResponse},
        409: {"description": "Duplicate name or slug", "model": ErrorResponse},
    },
    summary="Create a tag",
)
async def create_tag(
    body: TagWrite,
    db: AsyncSession = Depends(get_db_session),
) -> TagMutationResponse:
    tag = await tag_service.create_tag(db, body)
    return TagMutationResponse(
        message="Tag created successfully",
        tag=TagResponse.model_validate(tag),
    )


@router.get(
    "/tags/active",
    response_model=ActiveTagListResponse,
    summary="Active tags for the product tag picker",
)
async def list_active_tags(
    search: str = Query(default=""),
    limit: int = Query(default=50, description="0 or less returns every active tag"),
    db: AsyncSession = Depends(get_db_session),
) -> ActiveTagListResponse:
    tags = await tag_service.list_active_tags(db, search=search, limit=limit)
    return ActiveTagListResponse(tags=tags)


@router.get(
    "/tags/{tag_id}",
    response_model=TagEnvelope,
    responses={404: {"description": "Tag not found", "model": ErrorResponse}},
)
async def get_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> TagEnvelope:
    tag = await tag_service.get_tag(db, tag_id)
    return TagEnvelope(tag=TagResponse.model_validate(tag))


@router.put(
    "/tags/{tag_id}",
    response_model=TagMutationResponse,
    responses={
        400: {"description": "Invalid tag", "model": ErrorResponse},
        404: {"description": "Tag not found", "model": ErrorResponse},
        409: {"description": "Duplicate name or slug", "model": ErrorResponse},
    },
)
async def update_tag(
    tag_id: UUID,
    body: TagWrite,
    db: AsyncSession = Depends(get_db_session),
) -> TagMutationResponse:
    tag = await tag_service.update_tag(db, tag_id, body)
    return TagMutationResponse(
        message="Tag updated successfully",
        tag=TagResponse.model_validate(tag),
    )


@router.delete(
    "/tags/{tag_id}",
    response_model=MessageResponse,
    responses={409: {"description": "Tag still used by products", "model": ErrorResponse}},
)
async def delete_tag(
    tag_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete_tag(db, tag_id)
    return MessageResponse(message="Tag deleted successfully")

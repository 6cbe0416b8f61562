"""
RentOK Admin Backend — Tag Request/Response Schemas
====================================================

What:  API contract for /api/tags.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from rentok.schemas.common import Pagination


class TagWrite(BaseModel):
    """
    Body of POST /api/tags and PUT /api/tags/{id}.

    The slug is never accepted from the client; it is derived from `name`.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class TagResponse(BaseModel):
    tag_id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    color: str
    is_active: bool
    sort_order: int
    usage_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ActiveTag(BaseModel):
    """Compact tag used by the product form's tag picker."""

    tag_id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    color: str
    usage_count: int

    model_config = {"from_attributes": True}


class TagListResponse(BaseModel):
    tags: List[TagResponse]
    pagination: Pagination


class ActiveTagListResponse(BaseModel):
    tags: List[ActiveTag]


class TagEnvelope(BaseModel):
    tag: TagResponse


class TagMutationResponse(BaseModel):
    message: str
    tag: TagResponse


class TaggedProduct(BaseModel):
    """A product still referencing a tag that was asked to be deleted."""

    product_id: uuid.UUID
    title: str

    model_config = {"from_attributes": True}

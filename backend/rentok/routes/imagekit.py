"""
RentOK Admin Backend — ImageKit Route Handlers
===============================================

What:  GET /api/imagekit/auth signs a direct browser upload;
       DELETE /api/imagekit/delete removes a file by ID.
Who:   Called by the product and advertisement image pickers.
"""

from fastapi import APIRouter, Response

from rentok.exceptions import ValidationError
from rentok.schemas.common import ErrorResponse
from rentok.schemas.imagekit import (
    ImageKitAuthResponse,
    ImageKitDeleteRequest,
    ImageKitDeleteResponse,
)
from rentok.services.imagekit_service import imagekit_service

router = APIRouter(prefix="/api/imagekit", tags=["ImageKit"])


@router.get(
    "/auth",
    response_model=ImageKitAuthResponse,
    responses={500: {"description": "ImageKit is not configured", "model": ErrorResponse}},
    summary="Upload authentication parameters",
)
async def imagekit_auth(response: Response) -> ImageKitAuthResponse:
    # Each call mints a fresh single-use token
    response.headers["Cache-Control"] = "no-store"
    return imagekit_service.get_authentication_parameters()


@router.delete(
    "/delete",
    response_model=ImageKitDeleteResponse,
    responses={
        400: {"description": "File ID is required", "model": ErrorResponse},
        500: {"description": "ImageKit refused the deletion", "model": ErrorResponse},
    },
    summary="Delete an uploaded file",
)
async def imagekit_delete(body: ImageKitDeleteRequest) -> ImageKitDeleteResponse:
    if not body.file_id:
        raise ValidationError("File ID is required", field="fileId")
    await imagekit_service.delete_file(body.file_id)
    return ImageKitDeleteResponse(success=True)

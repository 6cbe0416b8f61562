"""ImageKit upload-signature and delete schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageKitAuthResponse(BaseModel):
    """Parameters the browser SDK needs to upload directly to ImageKit."""

    token: str = Field(description="Single-use random token")
    expire: int = Field(description="Expiry as epoch seconds")
    signature: str = Field(description="Hex HMAC-SHA1 of token + expire, keyed by the private key")


class ImageKitDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: Optional[str] = Field(default=None, alias="fileId")


class ImageKitDeleteResponse(BaseModel):
    success: bool

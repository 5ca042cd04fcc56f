from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DeployResponse(BaseModel):
    """Response of the archive (raw URL) deploy flow."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    netlify_data: dict = Field(alias="netlifyData")
    preview_url: Optional[str] = Field(default=None, alias="previewUrl")
    site_url: Optional[str] = Field(default=None, alias="siteUrl")


class LandingPageResponse(BaseModel):
    """Response of the inline-file (generated page) deploy flows."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    netlify_url: Optional[str] = Field(default=None, alias="netlifyUrl")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
    raw: Optional[str] = None

from typing import Optional

from pydantic import BaseModel, Field


class DeployResult(BaseModel):
    """URLs extracted from a deploy API response, plus the response itself."""

    preview_url: Optional[str] = None
    site_url: Optional[str] = None
    raw: dict = Field(default_factory=dict)

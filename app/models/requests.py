from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeployRequest(BaseModel):
    url: Optional[str] = None
    """Page to fetch verbatim and deploy. Checked by the handler so that a
    missing value produces a plain ``400 Missing url`` response."""


class NaturalLanguageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text_prompt: Optional[str] = Field(
        default=None,
        alias="textPrompt",
        description="Free-form description of the landing page to generate.",
    )

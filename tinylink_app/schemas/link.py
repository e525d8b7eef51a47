from pydantic import BaseModel, Field, computed_field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from tinylink_app.config import settings


class LinkCreate(BaseModel):
    """Request body for creating a link

    Only the shape is checked here; URL and code rules live in the service
    so every caller gets the same answer.
    """
    url: str = Field(..., max_length=2048, description="The URL to shorten (http or https)")
    code: Optional[str] = Field(None, description="Optional custom code, 6-8 alphanumeric characters")


class LinkResponse(BaseModel):
    """Response schema that serializes a stored Link

    - from_attributes=True reads straight from the Link value object
    - JSON keys are camelCase (createdAt, lastClicked, shortUrl); the
      snake_case names are still accepted on input
    - @computed_field adds the public short URL
    """
    id: str
    code: str
    url: str
    clicks: int
    created_at: datetime
    last_clicked: Optional[datetime] = None

    @computed_field(alias="shortUrl")
    @property
    def short_url(self) -> str:
        """Computed field - automatically generated from code"""
        return f"{settings.base_url}/{self.code}"

    # Pydantic V2 style configuration
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(BaseModel):
    message: str

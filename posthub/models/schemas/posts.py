"""
Pydantic schemas for the posts API.

Attributes are snake_case in Python and camelCase on the wire, matching the
JSON the front end has always consumed (``imageUrl``, ``affiliateLink``...).
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

class PostFields(BaseModel):
    """Caller-editable text fields of a post (everything except images)."""
    title: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None
    affiliate_link: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PostRead(BaseModel):
    """API form of a post.

    ``image_url`` and ``date`` are derived, never stored on the model, so
    they cannot drift from ``images`` and ``created_at``.
    """
    id: int
    title: str
    category: str = ""
    content: str
    images: List[str] = Field(default_factory=list)
    affiliate_link: str = ""
    created_at: str
    updated_at: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 7,
                "title": "Desk setup",
                "category": "Gear",
                "content": "Line one\nLine two",
                "images": ["/uploads/images-1718000000000-123456789.png"],
                "imageUrl": "/uploads/images-1718000000000-123456789.png",
                "affiliateLink": "https://example.com/ref",
                "createdAt": "2024-06-10T08:00:00Z",
                "updatedAt": None,
                "date": "2024-06-10T08:00:00Z",
            }
        },
    )

    @computed_field(alias="imageUrl")  # type: ignore[prop-decorator]
    @property
    def image_url(self) -> str:
        return self.images[0] if self.images else ""

    @computed_field(alias="date")  # type: ignore[prop-decorator]
    @property
    def date(self) -> str:
        return self.created_at

class PostMutationResponse(BaseModel):
    success: bool = True
    post: PostRead

class DeleteRequest(BaseModel):
    # any JSON value; the admin gate denies non-strings
    admin_password: Any = Field(None, alias="adminPassword")

    model_config = ConfigDict(populate_by_name=True)

class SuccessResponse(BaseModel):
    success: bool = True

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    request_id: Optional[str] = None

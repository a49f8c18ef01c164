"""
Product schemas for validation and serialization.

Titles and content come in Arabic/English pairs. Images are public URLs in
display order; the first one is the thumbnail.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin, PaginatedResponse


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: title_ar, title_en
    Optional: content_ar, content_en, yt_code

    Images are uploaded as files alongside these fields.
    """

    title_ar: str = Field(
        ...,
        min_length=1,
        description="Arabic title"
    )
    title_en: str = Field(
        ...,
        min_length=1,
        description="English title"
    )
    content_ar: str = Field(
        default="",
        description="Arabic description (HTML)"
    )
    content_en: str = Field(
        default="",
        description="English description (HTML)"
    )
    yt_code: Optional[str] = Field(
        None,
        description="YouTube video code",
        examples=["dQw4w9WgXcQ"]
    )

    @field_validator("yt_code")
    @classmethod
    def empty_yt_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Blank video codes are stored as null."""
        return v or None


class ProductUpdate(BaseSchema):
    """
    Update existing product.

    All fields optional - only provided fields are sent to the store.
    """

    title_ar: Optional[str] = Field(None, min_length=1, description="Arabic title")
    title_en: Optional[str] = Field(None, min_length=1, description="English title")
    content_ar: Optional[str] = Field(None, description="Arabic description (HTML)")
    content_en: Optional[str] = Field(None, description="English description (HTML)")
    images: Optional[list[str]] = Field(
        None,
        description="Full replacement list of image URLs, in display order"
    )
    yt_code: Optional[str] = Field(None, description="YouTube video code")

    def changes(self) -> dict:
        """
        Fields explicitly supplied by the caller.

        Titles and images are never nulled out; an explicit null for them is
        treated as "not supplied".
        """
        data = self.model_dump(exclude_unset=True)
        for key in ("title_ar", "title_en", "images"):
            if key in data and data[key] is None:
                del data[key]
        if data.get("yt_code") == "":
            data["yt_code"] = None
        return data


class ProductResponse(BaseSchema, TimestampMixin):
    """Product as stored."""

    id: str = Field(..., description="Product ID")
    title_ar: str
    title_en: str
    content_ar: Optional[str] = None
    content_en: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    yt_code: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v) -> str:
        """Stores may hand back integer keys."""
        return str(v)

    @field_validator("images", mode="before")
    @classmethod
    def drop_null_images(cls, v) -> list:
        """The gallery never holds nulls."""
        if v is None:
            return []
        return [url for url in v if url is not None]

    @property
    def thumbnail(self) -> Optional[str]:
        return self.images[0] if self.images else None


class ProductListResponse(PaginatedResponse):
    """Products, newest first, one page at a time."""

    data: list[ProductResponse]


class ImageUploadResponse(BaseSchema):
    """Public URLs of uploaded images, in upload order."""

    urls: list[str]

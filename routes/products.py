"""
Product API routes.

Create and bulk image upload take multipart forms (text fields plus image
files); update takes JSON with only the fields to change.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
import structlog

from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ImageUploadResponse,
)
from services.product_service import ProductService
from services.storage_service import UploadItem
from routes.deps import get_product_service
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


async def read_uploads(files: list[UploadFile]) -> list[UploadItem]:
    """Read multipart files into memory, keeping their order."""
    items = []
    for upload in files:
        items.append(UploadItem(
            filename=upload.filename or "image",
            content=await upload.read(),
            content_type=upload.content_type
        ))
    return items


# ===================
# ROUTES
# ===================

@router.get("", response_model=ProductListResponse)
async def list_products(
    search: str = Query("", description="Filter by Arabic or English title"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    service: ProductService = Depends(get_product_service)
):
    """
    List products, newest first.
    """
    try:
        return service.list_page(search=search, page=page, page_size=page_size)

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        return service.get_by_id(product_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    title_ar: str = Form(...),
    title_en: str = Form(...),
    content_ar: str = Form(""),
    content_en: str = Form(""),
    yt_code: Optional[str] = Form(None),
    images: list[UploadFile] = File(default=[]),
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    Images are uploaded first, in the order given; the first image is the
    thumbnail. If any image fails to upload, no product is created.

    Raises:
        422: Validation error
        502: Image upload failed
    """
    try:
        data = ProductCreate(
            title_ar=title_ar,
            title_en=title_en,
            content_ar=content_ar,
            content_en=content_en,
            yt_code=yt_code
        )
        items = await read_uploads(images)

        return await asyncio.to_thread(service.create, data, items)

    except Exception as e:
        return handle_error(e)


@router.post("/images", response_model=ImageUploadResponse, status_code=201)
async def upload_product_images(
    images: list[UploadFile] = File(...),
    service: ProductService = Depends(get_product_service)
):
    """
    Upload images for an existing product's gallery.

    Returns their public URLs; attach them with PATCH /{product_id}.

    Raises:
        502: Image upload failed
    """
    try:
        items = await read_uploads(images)
        urls = await asyncio.to_thread(service.upload_images, items)
        return ImageUploadResponse(urls=urls)

    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """
    Update an existing product.

    Only provided fields are updated.

    Raises:
        404: Product not found
        422: Validation error
    """
    try:
        return service.update(product_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """
    Delete a product.

    The row is removed; its images stay in storage unless configured otherwise.

    Raises:
        404: Product not found
    """
    try:
        service.delete(product_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)

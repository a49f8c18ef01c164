"""
Request dependencies.

The store client is created once in the application lifespan and kept on
app.state; services are built per request around it.
"""

from fastapi import Depends, Request
from supabase import Client

from config.settings import Settings, get_settings
from services.product_service import ProductService
from services.sheet_preview_service import SheetPreviewService
from services.sheet_service import SheetService
from services.storage_service import StorageService


def get_db(request: Request) -> Client:
    """Store client created at startup."""
    return request.app.state.db


def get_product_service(
    db: Client = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ProductService:
    return ProductService(
        db,
        StorageService(db, settings.images_bucket),
        table=settings.products_table,
        page_size=settings.products_page_size,
        upload_workers=settings.upload_max_workers,
        cleanup_failed_uploads=settings.cleanup_failed_uploads,
        delete_images=settings.delete_product_images,
    )


def get_sheet_service(
    db: Client = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SheetService:
    return SheetService(
        StorageService(db, settings.sheets_bucket),
        preview_service=SheetPreviewService(timeout=settings.fetch_timeout_seconds),
        public_app_url=settings.public_app_url,
        list_limit=settings.sheets_list_limit,
        page_size=settings.sheets_page_size,
        fetch_timeout=settings.fetch_timeout_seconds,
    )

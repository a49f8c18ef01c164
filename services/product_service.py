"""
Product service for catalog operations.

Rows live in the product table; images live in the images bucket and are
referenced from the row by public URL.
"""

from typing import Optional
import structlog

from supabase import Client

from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from services.storage_service import StorageService, UploadItem
from exceptions import (
    ProductNotFoundError,
    DatabaseError,
    store_message,
)

logger = structlog.get_logger(__name__)

# Product images are stored as "{epoch_millis}-{filename}"
IMAGE_NAME_SEPARATOR = "-"


class ProductService:
    """
    Product business logic.

    Handles CRUD operations for products and their image uploads.

    Args:
        db: Store client
        images: Storage for product images
        table: Product table name
        upload_workers: Concurrent uploads per batch
        cleanup_failed_uploads: Remove stored images when a batch fails
        delete_images: Remove a product's images when it is deleted
        page_size: Default products per listing page
    """

    def __init__(
        self,
        db: Client,
        images: StorageService,
        table: str = "product",
        upload_workers: int = 4,
        cleanup_failed_uploads: bool = False,
        delete_images: bool = False,
        page_size: int = 10
    ):
        self.db = db
        self.images = images
        self.table = table
        self.page_size = page_size
        self.upload_workers = upload_workers
        self.cleanup_failed_uploads = cleanup_failed_uploads
        self.delete_images = delete_images

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> list[ProductResponse]:
        """
        Get all products, newest first.

        Returns:
            List of ProductResponse ordered by created_at descending
        """
        logger.info("getting_products")

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )

            products = [ProductResponse(**row) for row in result.data]

            logger.info("products_retrieved", count=len(products))

            return products

        except Exception as e:
            logger.error(
                "get_products_failed",
                error=str(e)
            )
            raise DatabaseError("select", store_message(e))

    def list_page(
        self,
        search: str = "",
        page: int = 1,
        page_size: Optional[int] = None
    ) -> ProductListResponse:
        """
        List products, newest first.

        Args:
            search: Case-insensitive match against either title
            page: Page number (1-indexed)
            page_size: Items per page (defaults to the configured size)

        Returns:
            ProductListResponse
        """
        page_size = page_size or self.page_size
        needle = search.strip().lower()

        products = self.get_all()
        if needle:
            products = [
                p for p in products
                if needle in p.title_ar.lower() or needle in p.title_en.lower()
            ]

        offset = (page - 1) * page_size
        return ProductListResponse.create(
            data=products[offset:offset + page_size],
            total=len(products),
            page=page,
            page_size=page_size
        )

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Args:
            product_id: Product ID

        Returns:
            ProductResponse

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", store_message(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upload_images(self, files: list[UploadItem]) -> list[str]:
        """
        Upload product images concurrently.

        Args:
            files: Images to store

        Returns:
            Public URLs in the order the files were given

        Raises:
            ImageUploadError: If any upload fails
        """
        return self.images.upload_batch(
            files,
            separator=IMAGE_NAME_SEPARATOR,
            max_workers=self.upload_workers,
            cleanup_on_failure=self.cleanup_failed_uploads
        )

    def create(self, data: ProductCreate, images: Optional[list[UploadItem]] = None) -> ProductResponse:
        """
        Create a new product.

        All images are uploaded before the row is inserted; if any upload
        fails the insert is never attempted.

        Args:
            data: Product text fields
            images: Image files in display order

        Returns:
            Created ProductResponse

        Raises:
            ImageUploadError: If an image upload fails
            DatabaseError: If the insert fails
        """
        images = images or []
        logger.info("creating_product", title_en=data.title_en, images=len(images))

        image_urls = self.upload_images(images)

        insert_data = {
            "title_ar": data.title_ar,
            "title_en": data.title_en,
            "content_ar": data.content_ar,
            "content_en": data.content_en,
            "images": image_urls,
            "yt_code": data.yt_code or None,
        }

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )
        except Exception as e:
            logger.error(
                "create_product_failed",
                title_en=data.title_en,
                error=str(e)
            )
            raise DatabaseError("insert", store_message(e))

        product = ProductResponse(**result.data[0])

        logger.info(
            "product_created",
            product_id=product.id,
            images=len(product.images)
        )

        return product

    def update(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        """
        Update an existing product.

        Only supplied fields are sent; everything else is left as stored.

        Args:
            product_id: Product ID
            data: Fields to update

        Returns:
            Updated ProductResponse

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("updating_product", product_id=product_id)

        update_data = data.changes()

        if not update_data:
            # Nothing to update, return existing
            return self.get_by_id(product_id)

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "update_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("update", store_message(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        logger.info(
            "product_updated",
            product_id=product_id,
            fields=list(update_data.keys())
        )

        return ProductResponse(**result.data[0])

    def delete(self, product_id: str) -> bool:
        """
        Delete a product row.

        Images stay in storage unless delete_images is enabled.

        Args:
            product_id: Product ID

        Returns:
            True if deleted

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("deleting_product", product_id=product_id)

        image_urls = self.get_by_id(product_id).images if self.delete_images else []

        try:
            result = (
                self.db.table(self.table)
                .delete()
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "delete_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("delete", store_message(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        logger.info("product_deleted", product_id=product_id)

        if image_urls:
            self._remove_images(product_id, image_urls)

        return True

    # ===================
    # UTILITY METHODS
    # ===================

    def _remove_images(self, product_id: str, image_urls: list[str]) -> None:
        """Remove a deleted product's images; the row is already gone, so failures only log."""
        names = [
            name for name in (self.images.name_from_url(url) for url in image_urls)
            if name
        ]
        try:
            self.images.remove(names)
        except Exception as e:
            logger.warning(
                "product_images_cleanup_failed",
                product_id=product_id,
                images=len(names),
                error=str(e)
            )


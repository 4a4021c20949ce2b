"""Inline image cleanup.

Some catalog records were saved with images embedded as ``data:image``
URIs. The sweep clears those fields so only hosted image URLs remain.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from category_api.catalog.repository import CategoryRepository, ProductRepository

logger = structlog.get_logger()

INLINE_IMAGE_PREFIX = "data:image"


class ImageSanitizer:
    """Clears inline base64 images from categories, products and galleries.

    Running the sweep again on a cleaned store changes nothing.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize sanitizer with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def remove_base64_images(self) -> dict[str, int]:
        """Clear every image field holding an inline image and commit.

        Returns:
            Number of cleared rows per ``table.field``.
        """
        cleared: dict[str, int] = {}

        category_counts = await CategoryRepository(self.session).clear_image_prefix(
            INLINE_IMAGE_PREFIX
        )
        cleared.update({f"categories.{field}": count for field, count in category_counts.items()})
        cleared.update(
            await ProductRepository(self.session).clear_image_prefix(INLINE_IMAGE_PREFIX)
        )

        await self.session.commit()

        logger.info(
            "Inline images removed",
            cleared=cleared,
            total=sum(cleared.values()),
        )
        return cleared

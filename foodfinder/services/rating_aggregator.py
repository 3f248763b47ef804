import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from foodfinder.core.config import GENERAL_REVIEW
from foodfinder.core.identifiers import StoreId, normalize_store_id

logger = logging.getLogger(__name__)


class ReviewStore(Protocol):
    async def find_by_dish(self, store_id: StoreId, dish_name: str) -> Sequence[Any]:
        ...

    async def get_by_id(self, review_id: str) -> Optional[Any]:
        ...

    async def create(self, **fields: Any) -> Any:
        ...

    async def update(self, review_id: str, fields: Dict[str, Any]) -> Optional[Any]:
        ...

    async def delete(self, review_id: str) -> None:
        ...


class CatalogStore(Protocol):
    async def get_by_id(self, store_id: StoreId) -> Optional[Any]:
        ...

    async def replace_menu_items(
        self, store_id: StoreId, items: List[Dict[str, Any]]
    ) -> None:
        ...


class RatingAggregator:
    """
    Keeps the denormalized avg_rating/review_count of a menu item in sync
    with the dish reviews stored for it.

    Recalculation is best-effort: it runs after the review write has already
    been committed, and persistence errors are logged instead of raised so
    the review mutation itself is never reported as failed. There is no
    locking: two concurrent recomputes for the same store race on the
    full menu list write and the last one wins.
    """

    def __init__(
        self,
        reviews: ReviewStore,
        catalog: CatalogStore,
        session: Optional[AsyncSession] = None,
    ):
        self.reviews = reviews
        self.catalog = catalog
        # shared with the repositories; rolled back when a write fails
        self.session = session

    async def recompute(self, store_id: StoreId, dish_name: str) -> None:
        """
        Recalculate the average rating and review count of one dish.

        Args:
            store_id: Store owning the menu item
            dish_name: Exact menu item name (case-sensitive)
        """
        store_id = normalize_store_id(store_id)
        if not store_id or not dish_name or dish_name == GENERAL_REVIEW:
            return

        try:
            reviews = await self.reviews.find_by_dish(store_id, dish_name)

            count = len(reviews)
            total = sum(review.rating or 0 for review in reviews)
            avg = total / count if count > 0 else 0

            store = await self.catalog.get_by_id(store_id)
            if not store:
                logger.debug("Store %s not found, skipping %r aggregation", store_id, dish_name)
                return

            # entries that are not dicts are written back untouched
            menu_items = [
                dict(item) if isinstance(item, dict) else item
                for item in (store.menu_items or [])
            ]
            index = next(
                (
                    i
                    for i, item in enumerate(menu_items)
                    if isinstance(item, dict) and item.get("name") == dish_name
                ),
                -1,
            )
            if index < 0:
                logger.debug("Dish %r is not on the menu of store %s", dish_name, store_id)
                return

            menu_items[index]["avg_rating"] = avg
            menu_items[index]["review_count"] = count
            await self.catalog.replace_menu_items(store_id, menu_items)
            logger.info(
                "Dish %r of store %s: avg_rating=%.2f review_count=%d",
                dish_name,
                store_id,
                avg,
                count,
            )
        except (SQLAlchemyError, OSError) as e:
            logger.exception(
                "Aggregation failed for store %s dish %r: %s", store_id, dish_name, e
            )
            if self.session is not None:
                await self.session.rollback()

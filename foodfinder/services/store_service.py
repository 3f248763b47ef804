import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from foodfinder.core.config import STORE_CACHE_TTL
from foodfinder.core.identifiers import normalize_store_id
from foodfinder.models.menu_item import MenuItem
from foodfinder.models.store import Store
from foodfinder.models.store_review import StoreReview
from foodfinder.repositories.event_repository import EventRepository
from foodfinder.repositories.store_repository import StoreRepository
from foodfinder.utils.cache import (
    get_cache_key,
    get_cached_data,
    set_cached_data,
    invalidate_cache,
)
from foodfinder.utils.validators import (
    validate_rating,
    validate_price,
    is_valid_dish_name,
    sanitize_input,
)

logger = logging.getLogger(__name__)

EVENT_COUNTERS = {
    "view": "views",
    "whatsapp_click": "whatsapp_clicks",
}


def store_summary(store: Store) -> Dict[str, Any]:
    """Short JSON-friendly view of a store used by listings and the cache."""
    return {
        "id": store.id,
        "name": store.name,
        "category": store.category,
        "region": store.region,
        "rating": store.rating or 0,
        "reviews_count": store.reviews_count or 0,
        "is_featured": bool(store.is_featured),
    }


class StoreService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = StoreRepository(session)
        self.events = EventRepository(session)

    async def create_store(self, name: str, owner_id: Optional[str] = None, **fields: Any) -> Store:
        if not name or not name.strip():
            raise ValueError("Store name cannot be empty")
        store = await self.repo.create(name.strip(), owner_id=owner_id, **fields)
        logger.info("Store %s (%s) registered, status %s", store.name, store.id, store.status)
        return store

    async def get_by_id(self, store_id) -> Optional[Store]:
        return await self.repo.get_by_id(normalize_store_id(store_id))

    async def get_by_owner(self, owner_id: str) -> Optional[Store]:
        return await self.repo.get_by_owner(str(owner_id))

    async def list_stores(self) -> List[Store]:
        return await self.repo.get_all()

    async def list_pending(self) -> List[Store]:
        return await self.repo.get_by_status("pending")

    async def search_stores(self, search_term: str = "") -> List[Dict[str, Any]]:
        """
        Approved stores whose name, description or keywords contain the term.

        Args:
            search_term: Case-insensitive substring, empty for all approved stores

        Returns:
            List[Dict[str, Any]]: Store summaries (see store_summary)
        """
        term = (search_term or "").strip().lower()
        key = get_cache_key("stores", "search", term or "*")
        cached = await get_cached_data(key)
        if cached is not None:
            return cached

        stores = await self.repo.get_by_status("approved")
        if term:
            stores = [
                store
                for store in stores
                if term in (store.name or "").lower()
                or term in (store.description or "").lower()
                or any(term in str(k).lower() for k in (store.keywords or []))
            ]

        result = [store_summary(store) for store in stores]
        await set_cached_data(key, result, ttl=STORE_CACHE_TTL)
        return result

    async def set_menu(self, store_id, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Replace a store's menu. Existing aggregates are kept for items whose
        name is unchanged.

        Raises:
            ValueError: If the store does not exist or an item is invalid
        """
        store_id = normalize_store_id(store_id)
        store = await self.repo.get_by_id(store_id)
        if not store:
            raise ValueError("Store does not exist")

        previous = {}
        for item in store.menu_items or []:
            if not isinstance(item, dict):
                continue
            previous.setdefault(item.get("name"), item)

        menu = []
        for raw in items:
            name = (raw.get("name") or "").strip()
            if not is_valid_dish_name(name):
                raise ValueError(f"Invalid dish name: {raw.get('name')!r}")
            old = previous.get(name, {})
            item = MenuItem(
                name=name,
                price=validate_price(raw.get("price", 0)),
                image_url=raw.get("image_url"),
                is_available=bool(raw.get("is_available", True)),
                avg_rating=float(old.get("avg_rating") or 0),
                review_count=int(old.get("review_count") or 0),
            )
            menu.append(item.to_dict())

        await self.repo.replace_menu_items(store_id, menu)
        logger.info("Menu of store %s replaced: %d items", store_id, len(menu))
        return menu

    async def get_menu(self, store_id) -> List[MenuItem]:
        store = await self.get_by_id(store_id)
        if not store:
            return []
        return [
            MenuItem.from_dict(item)
            for item in store.menu_items or []
            if isinstance(item, dict)
        ]

    async def add_store_review(
        self,
        store_id,
        user_id: str,
        user_name: str,
        rating: Any,
        comment: str = "",
        user_photo: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> StoreReview:
        """
        Add a store-wide review and update the store's running average.

        The store row is locked for the read-modify-write and the review and
        new totals are committed together.

        Raises:
            ValueError: If the store does not exist or the rating is invalid
        """
        rating = validate_rating(rating)
        store_id = normalize_store_id(store_id)
        try:
            store = await self.repo.get_for_update(store_id)
            if not store:
                raise ValueError("Store does not exist")

            new_count = (store.reviews_count or 0) + 1
            new_total = (store.rating_total or 0) + rating

            review = StoreReview(
                store_id=store_id,
                user_id=str(user_id),
                user_name=user_name or "",
                user_photo=user_photo,
                rating=rating,
                comment=sanitize_input(comment),
                image_url=image_url,
            )
            self.session.add(review)

            store.reviews_count = new_count
            store.rating_total = new_total
            store.rating = new_total / new_count
            self.session.add(store)

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(review)
        logger.info(
            "Store review %s for %s, store rating now %.2f (%d reviews)",
            review.id,
            store_id,
            store.rating,
            store.reviews_count,
        )
        await invalidate_cache(pattern="stores:*")
        return review

    async def toggle_approval(self, store_id) -> Optional[Store]:
        store = await self.get_by_id(store_id)
        if not store:
            return None
        new_status = "pending" if store.status == "approved" else "approved"
        logger.info("Store %s status %s -> %s", store.id, store.status, new_status)
        store = await self.repo.update_status(store, new_status)
        await invalidate_cache(pattern="stores:*")
        return store

    async def toggle_featured(self, store_id) -> Optional[Store]:
        store = await self.get_by_id(store_id)
        if not store:
            return None
        store = await self.repo.update_featured(store, not store.is_featured)
        await invalidate_cache(pattern="stores:*")
        return store

    async def track_event(self, user_id: str, store_id, type_: str) -> bool:
        """
        Record a view or WhatsApp click and bump the matching store counter.

        Tracking never interrupts the caller: failures are logged.

        Returns:
            bool: True when both the event and the counter were written
        """
        column = EVENT_COUNTERS.get(type_)
        if column is None:
            raise ValueError(f"Unknown event type: {type_}")

        store_id = normalize_store_id(store_id)
        try:
            await self.events.create(str(user_id), store_id, type_)
            await self.repo.increment_counter(store_id, column)
            return True
        except SQLAlchemyError as e:
            logger.error("Tracking error for store %s: %s", store_id, e)
            await self.session.rollback()
            return False

    async def get_analytics(self, store_id) -> Optional[Dict[str, Any]]:
        """
        Owner dashboard numbers: counters on the store row, event totals
        from the events table, and per-dish ratings.

        Returns:
            Optional[Dict[str, Any]]: None when the store does not exist
        """
        store_id = normalize_store_id(store_id)
        store = await self.repo.get_by_id(store_id)
        if not store:
            return None

        return {
            "name": store.name,
            "status": store.status,
            "views": store.views or 0,
            "whatsapp_clicks": store.whatsapp_clicks or 0,
            "view_events": await self.events.count_by_type(store_id, "view"),
            "click_events": await self.events.count_by_type(store_id, "whatsapp_click"),
            "rating": store.rating or 0,
            "reviews_count": store.reviews_count or 0,
            "dishes": [
                MenuItem.from_dict(item)
                for item in store.menu_items or []
                if isinstance(item, dict)
            ],
        }

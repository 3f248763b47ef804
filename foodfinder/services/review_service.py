import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from foodfinder.core.config import ADMIN_REVIEW_LIMIT
from foodfinder.core.identifiers import normalize_store_id
from foodfinder.models.review import DishReview
from foodfinder.repositories.review_repository import ReviewRepository
from foodfinder.repositories.store_repository import StoreRepository
from foodfinder.services.rating_aggregator import RatingAggregator
from foodfinder.utils.cache import invalidate_cache
from foodfinder.utils.validators import validate_rating, sanitize_input

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"dish_name", "rating", "comment", "image_url"}


class ReviewService:
    def __init__(
        self,
        session: AsyncSession,
        aggregator: Optional[RatingAggregator] = None,
    ):
        self.session = session
        self.repo = ReviewRepository(session)
        self.aggregator = aggregator or RatingAggregator(
            self.repo, StoreRepository(session), session=session
        )

    async def add_review(
        self,
        store_id,
        user_id: str,
        user_name: str,
        dish_name: str,
        rating: Any,
        comment: str = "",
        user_photo: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> DishReview:
        """
        Create a dish review and refresh the dish's aggregate rating.

        Raises:
            ValueError: If the store or dish is missing or the rating is invalid
        """
        store_id = normalize_store_id(store_id)
        if not store_id:
            raise ValueError("Store id is required")
        if not dish_name:
            raise ValueError("Dish name is required")

        review = await self.repo.create(
            store_id=store_id,
            user_id=str(user_id),
            user_name=user_name or "",
            user_photo=user_photo,
            dish_name=dish_name,
            rating=validate_rating(rating),
            comment=sanitize_input(comment),
            image_url=image_url,
        )
        logger.info(
            "Review %s added for store %s dish %r by %s",
            review.id,
            store_id,
            dish_name,
            user_id,
        )

        await self.aggregator.recompute(review.store_id, review.dish_name)
        # a failed recompute rolls the session back, which expires loaded rows
        await self.session.refresh(review)
        await invalidate_cache(pattern="stores:*")
        return review

    async def update_review(self, review_id: str, updates: Dict[str, Any]) -> DishReview:
        """
        Apply a partial update to a review and refresh the aggregate of the
        dish it now belongs to.

        Only the current dish is recomputed. When dish_name changes the
        previous dish keeps counting this review until its next recompute.

        Raises:
            ValueError: If the review does not exist or a field is invalid
        """
        fields = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS}
        if "rating" in fields:
            fields["rating"] = validate_rating(fields["rating"])
        if "comment" in fields:
            fields["comment"] = sanitize_input(fields["comment"])
        if "dish_name" in fields and not fields["dish_name"]:
            raise ValueError("Dish name is required")

        updated = await self.repo.update(review_id, fields)
        if updated is None:
            raise ValueError(f"Review {review_id} not found")

        if "dish_name" in fields:
            logger.warning(
                "Review %s moved to dish %r; the previous dish aggregate is not refreshed",
                review_id,
                fields["dish_name"],
            )

        review = await self.repo.get_by_id(review_id)
        if review:
            await self.aggregator.recompute(review.store_id, review.dish_name)
            await self.session.refresh(review)
        await invalidate_cache(pattern="stores:*")
        return review or updated

    async def delete_review(self, review_id: str) -> bool:
        """
        Delete a review and refresh the aggregate of its dish.

        The key is captured before the delete and the recompute runs after it,
        so the removed rating never counts toward the new average.

        Returns:
            bool: False when the review did not exist
        """
        review = await self.repo.get_by_id(review_id)
        if not review:
            return False
        store_id, dish_name = review.store_id, review.dish_name

        await self.repo.delete(review_id)
        logger.info("Review %s deleted (store %s dish %r)", review_id, store_id, dish_name)

        await self.aggregator.recompute(store_id, dish_name)
        await invalidate_cache(pattern="stores:*")
        return True

    async def get_review(self, review_id: str) -> Optional[DishReview]:
        return await self.repo.get_by_id(review_id)

    async def list_by_store(self, store_id) -> List[DishReview]:
        return await self.repo.get_by_store(normalize_store_id(store_id))

    async def list_by_user(self, user_id: str) -> List[DishReview]:
        return await self.repo.get_by_user(str(user_id))

    async def list_all(self, limit: int = ADMIN_REVIEW_LIMIT) -> List[DishReview]:
        """Newest reviews across all stores, capped for the admin view."""
        return await self.repo.get_all(limit)

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from foodfinder.core.identifiers import StoreId
from foodfinder.models.review import DishReview


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_dish(self, store_id: StoreId, dish_name: str) -> List[DishReview]:
        result = await self.session.execute(
            select(DishReview).filter(
                DishReview.store_id == store_id,
                DishReview.dish_name == dish_name,
            )
        )
        return result.scalars().all()

    async def get_by_id(self, review_id: str) -> Optional[DishReview]:
        result = await self.session.execute(
            select(DishReview).filter_by(id=review_id)
        )
        return result.scalars().first()

    async def get_by_store(self, store_id: StoreId) -> List[DishReview]:
        result = await self.session.execute(
            select(DishReview)
            .filter_by(store_id=store_id)
            .order_by(DishReview.created_at.desc())
        )
        return result.scalars().all()

    async def get_by_user(self, user_id: str) -> List[DishReview]:
        result = await self.session.execute(
            select(DishReview)
            .filter_by(user_id=user_id)
            .order_by(DishReview.created_at.desc())
        )
        return result.scalars().all()

    async def get_all(self, limit: int) -> List[DishReview]:
        result = await self.session.execute(
            select(DishReview).order_by(DishReview.created_at.desc()).limit(limit)
        )
        return result.scalars().all()

    async def create(self, **fields: Any) -> DishReview:
        review = DishReview(**fields)
        self.session.add(review)
        await self.session.commit()
        await self.session.refresh(review)
        return review

    async def update(self, review_id: str, fields: Dict[str, Any]) -> Optional[DishReview]:
        """Apply a partial update; returns None when the review does not exist."""
        review = await self.get_by_id(review_id)
        if not review:
            return None
        for key, value in fields.items():
            setattr(review, key, value)
        self.session.add(review)
        await self.session.commit()
        await self.session.refresh(review)
        return review

    async def delete(self, review_id: str) -> None:
        review = await self.get_by_id(review_id)
        if review:
            await self.session.delete(review)
            await self.session.commit()

from typing import Any, Dict, List, Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from foodfinder.core.identifiers import StoreId
from foodfinder.models.store import Store


class StoreRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> List[Store]:
        result = await self.session.execute(select(Store).order_by(Store.name))
        return result.scalars().all()

    async def get_by_status(self, status: str) -> List[Store]:
        result = await self.session.execute(
            select(Store).filter_by(status=status).order_by(Store.name)
        )
        return result.scalars().all()

    async def get_by_id(self, store_id: StoreId) -> Optional[Store]:
        result = await self.session.execute(select(Store).filter_by(id=store_id))
        return result.scalars().first()

    async def get_for_update(self, store_id: StoreId) -> Optional[Store]:
        result = await self.session.execute(
            select(Store).filter_by(id=store_id).with_for_update()
        )
        return result.scalars().first()

    async def get_by_owner(self, owner_id: str) -> Optional[Store]:
        result = await self.session.execute(select(Store).filter_by(owner_id=owner_id))
        return result.scalars().first()

    async def create(self, name: str, **fields: Any) -> Store:
        store = Store(name=name, **fields)
        self.session.add(store)
        await self.session.commit()
        await self.session.refresh(store)
        return store

    async def replace_menu_items(
        self, store_id: StoreId, items: List[Dict[str, Any]]
    ) -> None:
        """Overwrite the whole embedded menu list in a single write."""
        store = await self.session.get(Store, store_id)
        if not store:
            return
        store.menu_items = [dict(item) if isinstance(item, dict) else item for item in items]
        self.session.add(store)
        await self.session.commit()

    async def update_status(self, store: Store, status: str) -> Store:
        store.status = status
        self.session.add(store)
        await self.session.commit()
        await self.session.refresh(store)
        return store

    async def update_featured(self, store: Store, is_featured: bool) -> Store:
        store.is_featured = is_featured
        self.session.add(store)
        await self.session.commit()
        await self.session.refresh(store)
        return store

    async def increment_counter(self, store_id: StoreId, column: str) -> None:
        counter = getattr(Store, column)
        await self.session.execute(
            update(Store)
            .where(Store.id == store_id)
            .values({column: counter + 1})
            .execution_options(synchronize_session="fetch")
        )
        await self.session.commit()

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from foodfinder.core.identifiers import StoreId
from foodfinder.models.event import Event


class EventRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: str, store_id: StoreId, type_: str) -> Event:
        event = Event(user_id=user_id, store_id=store_id, type=type_)
        self.session.add(event)
        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def count_by_type(self, store_id: StoreId, type_: str) -> int:
        result = await self.session.execute(
            select(func.count(Event.id)).filter(
                Event.store_id == store_id, Event.type == type_
            )
        )
        return result.scalar() or 0

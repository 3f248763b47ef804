from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from foodfinder.models.user import UserProfile


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_uid(self, uid: str) -> Optional[UserProfile]:
        result = await self.session.execute(select(UserProfile).filter_by(uid=uid))
        return result.scalars().first()

    async def upsert(self, uid: str, data: Dict[str, Any]) -> UserProfile:
        """Merge data into the profile, creating it when absent."""
        profile = await self.get_by_uid(uid)
        if not profile:
            profile = UserProfile(uid=uid)
        for key, value in data.items():
            setattr(profile, key, value)
        self.session.add(profile)
        await self.session.commit()
        await self.session.refresh(profile)
        return profile

    async def update_favorites(
        self, profile: UserProfile, favorites: List[str]
    ) -> UserProfile:
        profile.favorites = list(favorites)
        self.session.add(profile)
        await self.session.commit()
        await self.session.refresh(profile)
        return profile

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional, List
from foodfinder.core.identifiers import normalize_store_id
from foodfinder.repositories.user_repository import UserRepository
from foodfinder.models.user import UserProfile
from foodfinder.utils.validators import is_valid_email, is_valid_phone
import logging

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {"first_name", "last_name", "email", "phone_number", "role"}
ROLES = {"user", "business", "admin"}


class UserService:
    def __init__(self, session: AsyncSession):
        self.repo = UserRepository(session)
        self.session = session

    async def get_profile(self, uid: str) -> Optional[UserProfile]:
        return await self.repo.get_by_uid(str(uid))

    async def get_or_create(self, uid: str, first_name: str = "", last_name: str = "") -> UserProfile:
        profile = await self.repo.get_by_uid(str(uid))
        if not profile:
            logger.info("Creating profile for %s", uid)
            profile = await self.repo.upsert(
                str(uid), {"first_name": first_name or "", "last_name": last_name or ""}
            )
        return profile

    async def update_profile(self, uid: str, data: Dict[str, Any]) -> UserProfile:
        """
        Merge the given fields into the profile, creating it if needed.

        Raises:
            ValueError: On an unknown role or a malformed email/phone
        """
        fields = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
        if "role" in fields and fields["role"] not in ROLES:
            raise ValueError(f"Unknown role: {fields['role']}")
        if fields.get("email") and not is_valid_email(fields["email"]):
            raise ValueError("Invalid email address")
        if fields.get("phone_number") and not is_valid_phone(fields["phone_number"]):
            raise ValueError("Invalid phone number")
        return await self.repo.upsert(str(uid), fields)

    async def toggle_favorite(self, uid: str, store_id, is_favorite: bool) -> List[str]:
        """
        Remove the store from favorites when it is currently a favorite,
        otherwise add it once.

        Returns:
            List[str]: The updated favorites
        """
        store_id = normalize_store_id(store_id)
        profile = await self.get_or_create(uid)
        favorites = list(profile.favorites or [])
        if is_favorite:
            favorites = [f for f in favorites if f != store_id]
        elif store_id not in favorites:
            favorites.append(store_id)
        profile = await self.repo.update_favorites(profile, favorites)
        return list(profile.favorites)

    async def get_favorites(self, uid: str) -> List[str]:
        profile = await self.repo.get_by_uid(str(uid))
        if not profile:
            return []
        return list(profile.favorites or [])

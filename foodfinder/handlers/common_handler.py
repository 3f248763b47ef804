from aiogram import Router, types
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from foodfinder.core.config import ADMIN_CHAT_IDS
from foodfinder.core.database import get_session
from foodfinder.services.user_service import UserService
from foodfinder.utils.menu import get_main_keyboard, get_menu_text
import logging

router = Router()
logger = logging.getLogger(__name__)

PROFILE_COMMAND_FIELDS = {"email": "email", "phone": "phone_number"}


def get_role(chat_id: int) -> str:
    return "admin" if chat_id in ADMIN_CHAT_IDS else "user"


@router.message(Command("start"))
async def cmd_start(message: types.Message, state: FSMContext):
    await state.clear()
    user = message.from_user
    async with get_session() as session:
        await UserService(session).get_or_create(
            str(user.id), user.first_name or "", user.last_name or ""
        )

    role = get_role(message.chat.id)
    await message.answer(
        f"Mabuhay, {user.first_name}! 🇵🇭\n" + get_menu_text(role),
        parse_mode="HTML",
        reply_markup=get_main_keyboard(role),
    )


@router.message(Command("help"))
async def cmd_help(message: types.Message):
    role = get_role(message.chat.id)
    await message.answer(
        get_menu_text(role), parse_mode="HTML", reply_markup=get_main_keyboard(role)
    )


@router.message(Command("profile"))
async def cmd_profile(message: types.Message, command: CommandObject):
    user = message.from_user
    uid = str(user.id)
    parts = (command.args or "").split(maxsplit=1)
    field = None
    if parts:
        field = PROFILE_COMMAND_FIELDS.get(parts[0].lower())
        if field is None or len(parts) < 2:
            await message.answer("Usage: /profile [email|phone] [value]")
            return

    async with get_session() as session:
        svc = UserService(session)
        profile = await svc.get_or_create(uid, user.first_name or "", user.last_name or "")
        if field:
            try:
                profile = await svc.update_profile(uid, {field: parts[1].strip()})
            except ValueError as e:
                await message.answer(f"❌ {e}")
                return
            logger.info("User %s updated %s", uid, field)

    name = f"{profile.first_name} {profile.last_name}".strip()
    await message.answer(
        f"👤 {name or uid}\n"
        f"Role: {profile.role}\n"
        f"Email: {profile.email or '-'}\n"
        f"Phone: {profile.phone_number or '-'}\n"
        f"Favorites: {len(profile.favorites or [])}"
    )

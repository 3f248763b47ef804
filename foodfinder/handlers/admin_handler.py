from aiogram import Router, types, html
from aiogram.filters import Command, CommandObject
from foodfinder.core.config import ADMIN_CHAT_IDS
from foodfinder.core.database import get_session
from foodfinder.services.review_service import ReviewService
from foodfinder.services.store_service import StoreService
from foodfinder.utils.menu import format_stars
import logging

router = Router()
logger = logging.getLogger(__name__)


async def ensure_admin(message: types.Message) -> bool:
    if message.chat.id not in ADMIN_CHAT_IDS:
        await message.answer("You do not have access to this command.")
        return False
    return True


@router.message(Command("pending"))
async def cmd_pending(message: types.Message):
    if not await ensure_admin(message):
        return

    async with get_session() as session:
        stores = await StoreService(session).list_pending()

    if not stores:
        await message.answer("No stores waiting for approval.")
        return

    lines = [
        f"{html.bold(s.name)} · {html.quote(s.address or '-')}\n<code>/approve {s.id}</code>"
        for s in stores
    ]
    await message.answer("\n\n".join(lines), parse_mode="HTML")


@router.message(Command("approve"))
async def cmd_approve(message: types.Message, command: CommandObject):
    if not await ensure_admin(message):
        return
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /approve <store id>")
        return

    async with get_session() as session:
        store = await StoreService(session).toggle_approval(store_id)

    if not store:
        await message.answer("Store not found.")
        return
    logger.info("Admin %s set store %s to %s", message.chat.id, store.id, store.status)
    await message.answer(f"{store.name} is now {store.status}.")


@router.message(Command("feature"))
async def cmd_feature(message: types.Message, command: CommandObject):
    if not await ensure_admin(message):
        return
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /feature <store id>")
        return

    async with get_session() as session:
        store = await StoreService(session).toggle_featured(store_id)

    if not store:
        await message.answer("Store not found.")
        return
    state = "featured" if store.is_featured else "no longer featured"
    await message.answer(f"{store.name} is {state}.")


@router.message(Command("allreviews"))
async def cmd_allreviews(message: types.Message):
    if not await ensure_admin(message):
        return

    async with get_session() as session:
        reviews = await ReviewService(session).list_all()

    if not reviews:
        await message.answer("No reviews yet.")
        return

    lines = [
        f"{format_stars(r.rating)} {html.bold(r.dish_name)} by {html.quote(r.user_name or '?')}\n"
        f"{html.quote(r.comment or '')}\n<code>/removereview {r.id}</code>"
        for r in reviews
    ]
    # Telegram caps a message at 4096 characters.
    chunk = []
    size = 0
    for line in lines:
        if size + len(line) > 3500 and chunk:
            await message.answer("\n\n".join(chunk), parse_mode="HTML")
            chunk, size = [], 0
        chunk.append(line)
        size += len(line) + 2
    await message.answer("\n\n".join(chunk), parse_mode="HTML")


@router.message(Command("removereview"))
async def cmd_removereview(message: types.Message, command: CommandObject):
    if not await ensure_admin(message):
        return
    review_id = (command.args or "").strip()
    if not review_id:
        await message.answer("Usage: /removereview <review id>")
        return

    async with get_session() as session:
        deleted = await ReviewService(session).delete_review(review_id)

    if deleted:
        logger.info("Admin %s removed review %s", message.chat.id, review_id)
        await message.answer("🗑 Review removed.")
    else:
        await message.answer("Review not found.")

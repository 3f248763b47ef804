from aiogram import Router, types, html
from aiogram.filters import Command, CommandObject
from foodfinder.core.database import get_session
from foodfinder.services.review_service import ReviewService
from foodfinder.services.store_service import StoreService
from foodfinder.services.user_service import UserService
from foodfinder.utils.menu import format_stars
import logging

router = Router()
logger = logging.getLogger(__name__)

MAX_LISTED_STORES = 20
LATEST_REVIEWS = 3


@router.message(Command("stores"))
async def cmd_stores(message: types.Message, command: CommandObject):
    term = (command.args or "").strip()
    async with get_session() as session:
        stores = await StoreService(session).search_stores(term)

    if not stores:
        await message.answer("No stores found. Try another search.")
        return

    lines = []
    for store in stores[:MAX_LISTED_STORES]:
        badge = "⭐ " if store["is_featured"] else ""
        lines.append(
            f"{badge}{html.bold(store['name'])} ({html.quote(store['category'] or '-')})\n"
            f"{format_stars(store['rating'])} {store['rating']:.1f} "
            f"· {store['reviews_count']} reviews · <code>/store {store['id']}</code>"
        )
    await message.answer("\n\n".join(lines), parse_mode="HTML")


@router.message(Command("store"))
async def cmd_store(message: types.Message, command: CommandObject):
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /store <id>")
        return

    async with get_session() as session:
        svc = StoreService(session)
        store = await svc.get_by_id(store_id)
        if not store or store.status != "approved":
            await message.answer("Store not found.")
            return
        menu = await svc.get_menu(store_id)
        reviews = await ReviewService(session).list_by_store(store_id)
        await svc.track_event(str(message.from_user.id), store_id, "view")

    text = [
        html.bold(store.name),
        html.quote(store.address or ""),
        html.quote(store.description or ""),
        f"{format_stars(store.rating)} {store.rating or 0:.1f} ({store.reviews_count or 0} reviews)",
    ]
    if menu:
        text.append("")
        text.append(html.bold("Menu"))
        for item in menu:
            status = "" if item.is_available else " (sold out)"
            text.append(
                f"• {html.quote(item.name)} - S${item.price:.2f}{status}\n"
                f"  {format_stars(item.avg_rating)} {item.avg_rating:.1f} ({item.review_count})"
            )
    if reviews:
        text.append("")
        text.append(html.bold("Latest reviews"))
        for review in reviews[:LATEST_REVIEWS]:
            comment = f": {html.quote(review.comment)}" if review.comment else ""
            text.append(
                f"{format_stars(review.rating)} {html.quote(review.dish_name)} "
                f"by {html.quote(review.user_name or 'Anonymous')}{comment}"
            )
    text.append("")
    text.append(
        f"<code>/review {store.id}</code> · <code>/ratestore {store.id}</code> · "
        f"<code>/contact {store.id}</code>"
    )
    await message.answer("\n".join(text), parse_mode="HTML")


@router.message(Command("contact"))
async def cmd_contact(message: types.Message, command: CommandObject):
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /contact <id>")
        return

    async with get_session() as session:
        svc = StoreService(session)
        store = await svc.get_by_id(store_id)
        if not store or store.status != "approved":
            await message.answer("Store not found.")
            return
        if not store.contact_number:
            await message.answer(f"{store.name} has not shared a contact number.")
            return
        await svc.track_event(str(message.from_user.id), store_id, "whatsapp_click")

    number = "".join(ch for ch in store.contact_number if ch.isdigit())
    await message.answer(
        f"💬 Chat with {store.name} on WhatsApp: https://wa.me/{number}"
    )


@router.message(Command("fav"))
async def cmd_fav(message: types.Message, command: CommandObject):
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /fav <id>")
        return

    uid = str(message.from_user.id)
    async with get_session() as session:
        store = await StoreService(session).get_by_id(store_id)
        if not store:
            await message.answer("Store not found.")
            return
        user_svc = UserService(session)
        is_favorite = store_id in await user_svc.get_favorites(uid)
        await user_svc.toggle_favorite(uid, store_id, is_favorite)

    if is_favorite:
        await message.answer(f"💔 {store.name} removed from favorites.")
    else:
        await message.answer(f"❤️ {store.name} added to favorites.")


@router.message(Command("favorites"))
async def cmd_favorites(message: types.Message):
    uid = str(message.from_user.id)
    async with get_session() as session:
        favorites = await UserService(session).get_favorites(uid)
        store_svc = StoreService(session)
        stores = [await store_svc.get_by_id(store_id) for store_id in favorites]

    stores = [store for store in stores if store]
    if not stores:
        await message.answer("You have no favorite stores yet. Use /fav <id>.")
        return

    lines = [f"❤️ {html.bold(store.name)} · <code>/store {store.id}</code>" for store in stores]
    await message.answer("\n".join(lines), parse_mode="HTML")

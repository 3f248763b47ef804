from typing import Any, Dict, List
from aiogram import Router, types, html
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from foodfinder.core.database import get_session
from foodfinder.core.states import RegisterStoreStates, MenuStates
from foodfinder.services.store_service import StoreService
from foodfinder.services.user_service import UserService
from foodfinder.utils.menu import format_stars
from foodfinder.utils.validators import sanitize_input
import logging

router = Router()
logger = logging.getLogger(__name__)

SOLD_OUT_MARK = "(sold out)"


def parse_menu_text(text: str) -> List[Dict[str, Any]]:
    """
    Parse one dish per line: "Name - price", optionally ending with "(sold out)".

    Raises:
        ValueError: If a line has no " - " separator
    """
    items = []
    for number, line in enumerate((text or "").splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        is_available = True
        if line.lower().endswith(SOLD_OUT_MARK):
            is_available = False
            line = line[: -len(SOLD_OUT_MARK)].strip()
        name, sep, price = line.rpartition(" - ")
        if not sep:
            raise ValueError(f"Line {number}: use the format 'Name - price'")
        items.append(
            {"name": name.strip(), "price": price.strip(), "is_available": is_available}
        )
    return items


@router.message(Command("register"))
async def cmd_register(message: types.Message, state: FSMContext):
    async with get_session() as session:
        store = await StoreService(session).get_by_owner(str(message.from_user.id))

    if store:
        await message.answer(f"You already manage {store.name} ({store.status}).")
        return

    await message.answer("What is the name of your store?")
    await state.set_state(RegisterStoreStates.waiting_name)


@router.message(RegisterStoreStates.waiting_name)
async def process_register_name(message: types.Message, state: FSMContext):
    name = sanitize_input(message.text or "").strip()
    if not name or len(name) > 100:
        await message.answer("Please send a store name of up to 100 characters.")
        return

    await state.update_data(name=name)
    await message.answer("Where is it? Send the address (e.g. Lucky Plaza #04-12).")
    await state.set_state(RegisterStoreStates.waiting_address)


@router.message(RegisterStoreStates.waiting_address)
async def process_register_address(message: types.Message, state: FSMContext):
    await state.update_data(address=sanitize_input(message.text or "").strip())
    await message.answer("What kind of place is it? (e.g. Carinderia, Bakery, Restaurant)")
    await state.set_state(RegisterStoreStates.waiting_category)


@router.message(RegisterStoreStates.waiting_category)
async def process_register_category(message: types.Message, state: FSMContext):
    data = await state.get_data()
    if not data.get("name"):
        await message.answer("Registration expired. Start again with /register.")
        await state.clear()
        return

    uid = str(message.from_user.id)
    async with get_session() as session:
        store = await StoreService(session).create_store(
            data["name"],
            owner_id=uid,
            address=data.get("address", ""),
            category=sanitize_input(message.text or "").strip(),
        )
        await UserService(session).update_profile(uid, {"role": "business"})

    logger.info("User %s registered store %s", uid, store.id)
    await message.answer(
        f"✅ {store.name} is registered and waiting for approval.\n"
        f"Add your dishes with /setmenu."
    )
    await state.clear()


@router.message(Command("setmenu"))
async def cmd_setmenu(message: types.Message, state: FSMContext):
    async with get_session() as session:
        store = await StoreService(session).get_by_owner(str(message.from_user.id))

    if not store:
        await message.answer("You have no registered store. Use /register first.")
        return

    await state.update_data(store_id=store.id)
    await message.answer(
        "Send your full menu, one dish per line:\n"
        "Chicken Adobo - 8.50\n"
        "Pork Sisig - 10\n"
        "Halo-Halo - 6 (sold out)\n\n"
        "Ratings of dishes you keep are preserved."
    )
    await state.set_state(MenuStates.waiting_items)


@router.message(MenuStates.waiting_items)
async def process_menu_items(message: types.Message, state: FSMContext):
    data = await state.get_data()
    store_id = data.get("store_id")
    if not store_id:
        await message.answer("Menu update expired. Start again with /setmenu.")
        await state.clear()
        return

    try:
        items = parse_menu_text(message.text or "")
        if not items:
            raise ValueError("The menu is empty")
        async with get_session() as session:
            menu = await StoreService(session).set_menu(store_id, items)
    except ValueError as e:
        await message.answer(f"❌ {e}. Please send the menu again.")
        return

    await message.answer(f"✅ Menu saved: {len(menu)} dishes.")
    await state.clear()


@router.message(Command("analytics"))
async def cmd_analytics(message: types.Message):
    async with get_session() as session:
        svc = StoreService(session)
        store = await svc.get_by_owner(str(message.from_user.id))
        stats = await svc.get_analytics(store.id) if store else None

    if not stats:
        await message.answer("You have no registered store. Use /register first.")
        return

    lines = [
        f"📈 {html.bold(stats['name'])} ({stats['status']})",
        f"Views: {stats['views']}",
        f"WhatsApp clicks: {stats['whatsapp_clicks']}",
        f"{format_stars(stats['rating'])} {stats['rating']:.1f} ({stats['reviews_count']} store reviews)",
    ]
    if stats["dishes"]:
        lines.append("")
        for dish in stats["dishes"]:
            lines.append(
                f"• {html.quote(dish.name)}: {dish.avg_rating:.1f} ({dish.review_count})"
            )
    await message.answer("\n".join(lines), parse_mode="HTML")

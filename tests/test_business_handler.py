import pytest
from unittest.mock import AsyncMock, patch
from aiogram.types import Message, User as TgUser, Chat
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.memory import MemoryStorage

from foodfinder.core.states import RegisterStoreStates, MenuStates
from foodfinder.handlers.business_handler import (
    parse_menu_text,
    cmd_register,
    process_register_name,
    process_register_address,
    process_register_category,
    cmd_setmenu,
    process_menu_items,
    cmd_analytics,
)
from foodfinder.services.store_service import StoreService
from foodfinder.services.user_service import UserService


@pytest.fixture
def create_message():
    def _create_message(text="", chat_id=555, from_user_id=555):
        message = AsyncMock(spec=Message)
        message.text = text
        message.chat = Chat(id=chat_id, type="private")
        message.from_user = TgUser(id=from_user_id, is_bot=False, first_name="Aling Nena")
        message.answer = AsyncMock()
        return message

    return _create_message


@pytest.fixture
def state():
    return FSMContext(storage=MemoryStorage(), key="test")


@pytest.fixture
def patched_session(session_factory):
    with patch("foodfinder.handlers.business_handler.get_session", session_factory):
        yield


def test_parse_menu_text():
    items = parse_menu_text("Chicken Adobo - 8.50\n\nHalo-Halo - 6 (sold out)\n")

    assert items == [
        {"name": "Chicken Adobo", "price": "8.50", "is_available": True},
        {"name": "Halo-Halo", "price": "6", "is_available": False},
    ]


def test_parse_menu_text_rejects_missing_price():
    with pytest.raises(ValueError, match="Line 2"):
        parse_menu_text("Adobo - 8\nSisig")


@pytest.mark.asyncio
async def test_register_flow_creates_pending_store(session, patched_session, create_message, state):
    await cmd_register(create_message("/register"), state)
    assert await state.get_state() == RegisterStoreStates.waiting_name.state

    await process_register_name(create_message("Nena's Carinderia"), state)
    await process_register_address(create_message("Lucky Plaza #04-12"), state)
    msg = create_message("Carinderia")
    await process_register_category(msg, state)

    assert "waiting for approval" in msg.answer.call_args[0][0]
    assert await state.get_state() is None

    store = await StoreService(session).get_by_owner("555")
    assert store.name == "Nena's Carinderia"
    assert store.address == "Lucky Plaza #04-12"
    assert store.category == "Carinderia"
    assert store.status == "pending"
    assert (await UserService(session).get_profile("555")).role == "business"


@pytest.mark.asyncio
async def test_register_twice_is_refused(session, patched_session, create_message, state):
    await StoreService(session).create_store("Nena's", owner_id="555")

    msg = create_message("/register")
    await cmd_register(msg, state)

    msg.answer.assert_awaited_with("You already manage Nena's (pending).")
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_register_rejects_empty_name(create_message, state):
    await state.set_state(RegisterStoreStates.waiting_name)

    await process_register_name(create_message("   "), state)

    assert await state.get_state() == RegisterStoreStates.waiting_name.state


@pytest.mark.asyncio
async def test_setmenu_keeps_dish_ratings(session, patched_session, create_message, state):
    store = await StoreService(session).create_store(
        "Nena's",
        owner_id="555",
        menu_items=[{"name": "Adobo", "price": 8.0, "avg_rating": 4.5, "review_count": 2}],
    )

    await cmd_setmenu(create_message("/setmenu"), state)
    assert await state.get_state() == MenuStates.waiting_items.state

    msg = create_message("Adobo - 9\nSisig - 10,50")
    await process_menu_items(msg, state)

    msg.answer.assert_awaited_with("✅ Menu saved: 2 dishes.")
    menu = await StoreService(session).get_menu(store.id)
    assert [(i.name, i.price) for i in menu] == [("Adobo", 9.0), ("Sisig", 10.5)]
    assert (menu[0].avg_rating, menu[0].review_count) == (4.5, 2)
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_setmenu_bad_line_keeps_state(session, patched_session, create_message, state):
    await StoreService(session).create_store("Nena's", owner_id="555")
    await cmd_setmenu(create_message("/setmenu"), state)

    msg = create_message("Adobo eight dollars")
    await process_menu_items(msg, state)

    assert "Line 1" in msg.answer.call_args[0][0]
    assert await state.get_state() == MenuStates.waiting_items.state


@pytest.mark.asyncio
async def test_setmenu_without_store(session, patched_session, create_message, state):
    msg = create_message("/setmenu")
    await cmd_setmenu(msg, state)

    msg.answer.assert_awaited_with("You have no registered store. Use /register first.")
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_analytics_shows_counters(session, patched_session, create_message):
    svc = StoreService(session)
    store = await svc.create_store(
        "Nena's",
        owner_id="555",
        status="approved",
        menu_items=[{"name": "Adobo", "price": 8.0, "avg_rating": 4.5, "review_count": 2}],
    )
    await svc.track_event("u1", store.id, "view")
    await svc.track_event("u1", store.id, "whatsapp_click")

    msg = create_message("/analytics")
    await cmd_analytics(msg)

    text = msg.answer.call_args[0][0]
    assert "Views: 1" in text
    assert "WhatsApp clicks: 1" in text
    assert "Adobo: 4.5 (2)" in text


@pytest.mark.asyncio
async def test_analytics_without_store(session, patched_session, create_message):
    msg = create_message("/analytics")
    await cmd_analytics(msg)
    msg.answer.assert_awaited_with("You have no registered store. Use /register first.")

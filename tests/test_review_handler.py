import pytest
from unittest.mock import AsyncMock, patch
from aiogram.filters import CommandObject
from aiogram.types import Message, User as TgUser, Chat
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.memory import MemoryStorage

from foodfinder.core.states import DishReviewStates, EditReviewStates, StoreReviewStates
from foodfinder.handlers.review_handler import (
    cmd_review,
    process_review_dish,
    process_review_rating,
    process_review_comment,
    cmd_editreview,
    process_edit_rating,
    process_edit_comment,
    cmd_deletereview,
    cmd_myreviews,
    cmd_ratestore,
    process_store_rating,
    process_store_comment,
)
from foodfinder.repositories.store_repository import StoreRepository
from foodfinder.services.review_service import ReviewService


@pytest.fixture
def create_message():
    def _create_message(text="", chat_id=333, from_user_id=333):
        message = AsyncMock(spec=Message)
        message.text = text
        message.chat = Chat(id=chat_id, type="private")
        message.from_user = TgUser(
            id=from_user_id, is_bot=False, first_name="Juan", last_name="Cruz"
        )
        message.answer = AsyncMock()
        return message

    return _create_message


@pytest.fixture
def state():
    storage = MemoryStorage()
    state = FSMContext(storage=storage, key="test")
    return state


@pytest.fixture
def patched_session(session_factory):
    with patch("foodfinder.handlers.review_handler.get_session", session_factory):
        yield


def command(name, args=None):
    return CommandObject(prefix="/", command=name, args=args)


async def create_store(session, status="approved"):
    return await StoreRepository(session).create(
        "Kusina ni Lola",
        status=status,
        menu_items=[
            {"name": "Adobo", "price": 9.0, "avg_rating": 0, "review_count": 0},
            {"name": "Sisig", "price": 11.0, "avg_rating": 0, "review_count": 0},
        ],
    )


@pytest.mark.asyncio
async def test_review_flow_updates_dish_rating(session, patched_session, create_message, state):
    store = await create_store(session)

    await cmd_review(create_message(f"/review {store.id}"), command("review", store.id), state)
    assert await state.get_state() == DishReviewStates.waiting_dish.state

    await process_review_dish(create_message("Sisig"), state)
    assert await state.get_state() == DishReviewStates.waiting_rating.state

    await process_review_rating(create_message("4"), state)
    assert await state.get_state() == DishReviewStates.waiting_comment.state

    msg = create_message("Crispy and sizzling")
    await process_review_comment(msg, state)

    assert await state.get_state() is None
    assert "posted" in msg.answer.call_args[0][0]

    store = await StoreRepository(session).get_by_id(store.id)
    sisig = store.menu_items[1]
    assert (sisig["avg_rating"], sisig["review_count"]) == (4.0, 1)

    reviews = await ReviewService(session).list_by_user("333")
    assert reviews[0].user_name == "Juan Cruz"
    assert reviews[0].comment == "Crispy and sizzling"


@pytest.mark.asyncio
async def test_review_unknown_store(session, patched_session, create_message, state):
    msg = create_message("/review nope")
    await cmd_review(msg, command("review", "nope"), state)
    msg.answer.assert_awaited_with("Store not found.")
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_review_pending_store_is_hidden(session, patched_session, create_message, state):
    store = await create_store(session, status="pending")
    msg = create_message()
    await cmd_review(msg, command("review", store.id), state)
    msg.answer.assert_awaited_with("Store not found.")


@pytest.mark.asyncio
async def test_review_rejects_dish_not_on_menu(create_message, state):
    await state.update_data(store_id="s1", dishes=["Adobo"])
    await state.set_state(DishReviewStates.waiting_dish)

    await process_review_dish(create_message("Pizza"), state)

    assert await state.get_state() == DishReviewStates.waiting_dish.state


@pytest.mark.asyncio
async def test_review_accepts_general_review(create_message, state):
    await state.update_data(store_id="s1", dishes=["Adobo"])
    await state.set_state(DishReviewStates.waiting_dish)

    await process_review_dish(create_message("General Review"), state)

    assert (await state.get_data())["dish_name"] == "General Review"


@pytest.mark.asyncio
async def test_review_rating_invalid_input(create_message, state):
    await state.set_state(DishReviewStates.waiting_rating)
    msg = create_message("seven")
    await process_review_rating(msg, state)
    msg.answer.assert_awaited()
    assert await state.get_state() == DishReviewStates.waiting_rating.state


@pytest.mark.asyncio
async def test_review_comment_with_expired_state(create_message, state):
    msg = create_message("nice")
    await process_review_comment(msg, state)
    msg.answer.assert_awaited()
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_edit_flow(session, patched_session, create_message, state):
    store = await create_store(session)
    review = await ReviewService(session).add_review(store.id, "333", "Juan", "Adobo", 2)

    await cmd_editreview(create_message(), command("editreview", review.id), state)
    assert await state.get_state() == EditReviewStates.waiting_rating.state

    await process_edit_rating(create_message("5"), state)
    await process_edit_comment(create_message("-"), state)

    review = await ReviewService(session).get_review(review.id)
    assert review.rating == 5
    store = await StoreRepository(session).get_by_id(store.id)
    assert store.menu_items[0]["avg_rating"] == 5.0


@pytest.mark.asyncio
async def test_edit_someone_elses_review(session, patched_session, create_message, state):
    store = await create_store(session)
    review = await ReviewService(session).add_review(store.id, "999", "Maria", "Adobo", 2)

    msg = create_message()
    await cmd_editreview(msg, command("editreview", review.id), state)

    msg.answer.assert_awaited_with("Review not found.")
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_delete_own_review(session, patched_session, create_message):
    store = await create_store(session)
    svc = ReviewService(session)
    review = await svc.add_review(store.id, "333", "Juan", "Adobo", 3)
    other = await svc.add_review(store.id, "999", "Maria", "Adobo", 5)

    msg = create_message()
    await cmd_deletereview(msg, command("deletereview", other.id))
    msg.answer.assert_awaited_with("Review not found.")

    msg = create_message()
    await cmd_deletereview(msg, command("deletereview", review.id))
    msg.answer.assert_awaited_with("🗑 Review deleted.")

    store = await StoreRepository(session).get_by_id(store.id)
    assert store.menu_items[0]["avg_rating"] == 5.0
    assert store.menu_items[0]["review_count"] == 1


@pytest.mark.asyncio
async def test_myreviews_empty(session, patched_session, create_message):
    msg = create_message()
    await cmd_myreviews(msg)
    msg.answer.assert_awaited_with("You have not written any reviews yet.")


@pytest.mark.asyncio
async def test_ratestore_flow_updates_store_rating(session, patched_session, create_message, state):
    store = await create_store(session)

    await cmd_ratestore(create_message(), command("ratestore", store.id), state)
    assert await state.get_state() == StoreReviewStates.waiting_rating.state

    await process_store_rating(create_message("4"), state)
    assert await state.get_state() == StoreReviewStates.waiting_comment.state

    msg = create_message("Friendly staff")
    await process_store_comment(msg, state)

    assert "rated 4.0 (1 reviews)" in msg.answer.call_args[0][0]
    assert await state.get_state() is None
    store = await StoreRepository(session).get_by_id(store.id)
    assert store.reviews_count == 1
    assert store.rating_total == 4
    # dish aggregates are separate from the store rating
    assert store.menu_items[0]["review_count"] == 0


@pytest.mark.asyncio
async def test_ratestore_unknown_store(session, patched_session, create_message, state):
    msg = create_message()
    await cmd_ratestore(msg, command("ratestore", "nope"), state)
    msg.answer.assert_awaited_with("Store not found.")
    assert await state.get_state() is None


@pytest.mark.asyncio
async def test_ratestore_store_removed_mid_flow(session, patched_session, create_message, state):
    await state.update_data(store_id="gone", rating=5)
    await state.set_state(StoreReviewStates.waiting_comment)

    msg = create_message("-")
    await process_store_comment(msg, state)

    msg.answer.assert_awaited_with("❌ Store does not exist")
    assert await state.get_state() is None

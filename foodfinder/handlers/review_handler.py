from aiogram import Router, types, html
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.utils.keyboard import ReplyKeyboardBuilder
from foodfinder.core.config import GENERAL_REVIEW
from foodfinder.core.database import get_session
from foodfinder.core.states import DishReviewStates, EditReviewStates, StoreReviewStates
from foodfinder.services.review_service import ReviewService
from foodfinder.services.store_service import StoreService
from foodfinder.utils.menu import get_main_keyboard, format_stars
from foodfinder.utils.validators import validate_rating
import logging

router = Router()
logger = logging.getLogger(__name__)

SKIP_COMMENT = "-"


def rating_keyboard():
    kb = ReplyKeyboardBuilder()
    for stars in range(1, 6):
        kb.button(text=str(stars))
    kb.adjust(5)
    return kb.as_markup(resize_keyboard=True, one_time_keyboard=True)


@router.message(Command("review"))
async def cmd_review(message: types.Message, command: CommandObject, state: FSMContext):
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /review <store id>")
        return

    async with get_session() as session:
        svc = StoreService(session)
        store = await svc.get_by_id(store_id)
        if not store or store.status != "approved":
            await message.answer("Store not found.")
            return
        menu = await svc.get_menu(store_id)

    dishes = [item.name for item in menu]
    kb = ReplyKeyboardBuilder()
    for name in dishes:
        kb.button(text=name)
    kb.button(text=GENERAL_REVIEW)
    kb.adjust(2)

    await state.update_data(store_id=store.id, dishes=dishes)
    await message.answer(
        f"Which dish from {store.name} are you reviewing?",
        reply_markup=kb.as_markup(resize_keyboard=True),
    )
    await state.set_state(DishReviewStates.waiting_dish)


@router.message(DishReviewStates.waiting_dish)
async def process_review_dish(message: types.Message, state: FSMContext):
    data = await state.get_data()
    dish_name = message.text or ""
    if dish_name != GENERAL_REVIEW and dish_name not in data.get("dishes", []):
        await message.answer("Please pick a dish from the keyboard.")
        return

    await state.update_data(dish_name=dish_name)
    await message.answer("How many stars? (1-5)", reply_markup=rating_keyboard())
    await state.set_state(DishReviewStates.waiting_rating)


@router.message(DishReviewStates.waiting_rating)
async def process_review_rating(message: types.Message, state: FSMContext):
    try:
        rating = validate_rating(message.text or "")
    except ValueError:
        await message.answer("Please send a number from 1 to 5.")
        return

    await state.update_data(rating=rating)
    await message.answer(
        f"Write a short comment, or send {SKIP_COMMENT} to skip.",
        reply_markup=types.ReplyKeyboardRemove(),
    )
    await state.set_state(DishReviewStates.waiting_comment)


@router.message(DishReviewStates.waiting_comment)
async def process_review_comment(message: types.Message, state: FSMContext):
    data = await state.get_data()
    comment = "" if message.text == SKIP_COMMENT else (message.text or "")

    if not data.get("store_id") or not data.get("dish_name") or not data.get("rating"):
        await message.answer("Review session expired. Start again with /review.")
        await state.clear()
        return

    user = message.from_user
    try:
        async with get_session() as session:
            review = await ReviewService(session).add_review(
                store_id=data["store_id"],
                user_id=str(user.id),
                user_name=user.full_name,
                dish_name=data["dish_name"],
                rating=data["rating"],
                comment=comment,
            )
    except ValueError as e:
        await message.answer(f"❌ {e}")
        await state.clear()
        return

    await message.answer(
        f"✅ Thanks! Your {review.rating}★ review of {review.dish_name} is posted.",
        reply_markup=get_main_keyboard(),
    )
    await state.clear()


@router.message(Command("ratestore"))
async def cmd_ratestore(message: types.Message, command: CommandObject, state: FSMContext):
    store_id = (command.args or "").strip()
    if not store_id:
        await message.answer("Usage: /ratestore <store id>")
        return

    async with get_session() as session:
        store = await StoreService(session).get_by_id(store_id)

    if not store or store.status != "approved":
        await message.answer("Store not found.")
        return

    await state.update_data(store_id=store.id)
    await message.answer(
        f"How would you rate {store.name} overall? (1-5)", reply_markup=rating_keyboard()
    )
    await state.set_state(StoreReviewStates.waiting_rating)


@router.message(StoreReviewStates.waiting_rating)
async def process_store_rating(message: types.Message, state: FSMContext):
    try:
        rating = validate_rating(message.text or "")
    except ValueError:
        await message.answer("Please send a number from 1 to 5.")
        return

    await state.update_data(rating=rating)
    await message.answer(
        f"Write a short comment, or send {SKIP_COMMENT} to skip.",
        reply_markup=types.ReplyKeyboardRemove(),
    )
    await state.set_state(StoreReviewStates.waiting_comment)


@router.message(StoreReviewStates.waiting_comment)
async def process_store_comment(message: types.Message, state: FSMContext):
    data = await state.get_data()
    if not data.get("store_id") or not data.get("rating"):
        await message.answer("Review session expired. Start again with /ratestore.")
        await state.clear()
        return

    comment = "" if message.text == SKIP_COMMENT else (message.text or "")
    user = message.from_user
    try:
        async with get_session() as session:
            svc = StoreService(session)
            await svc.add_store_review(
                store_id=data["store_id"],
                user_id=str(user.id),
                user_name=user.full_name,
                rating=data["rating"],
                comment=comment,
            )
            store = await svc.get_by_id(data["store_id"])
    except ValueError as e:
        await message.answer(f"❌ {e}")
        await state.clear()
        return

    await message.answer(
        f"✅ Thanks! {store.name} is now rated {store.rating:.1f} "
        f"({store.reviews_count} reviews).",
        reply_markup=get_main_keyboard(),
    )
    await state.clear()


@router.message(Command("myreviews"))
async def cmd_myreviews(message: types.Message):
    async with get_session() as session:
        reviews = await ReviewService(session).list_by_user(str(message.from_user.id))

    if not reviews:
        await message.answer("You have not written any reviews yet.")
        return

    lines = [
        f"{format_stars(r.rating)} {html.bold(r.dish_name)}\n"
        f"{html.quote(r.comment or '')}\n<code>{r.id}</code>"
        for r in reviews
    ]
    await message.answer("\n\n".join(lines), parse_mode="HTML")


@router.message(Command("editreview"))
async def cmd_editreview(message: types.Message, command: CommandObject, state: FSMContext):
    review_id = (command.args or "").strip()
    if not review_id:
        await message.answer("Usage: /editreview <review id>")
        return

    async with get_session() as session:
        review = await ReviewService(session).get_review(review_id)

    if not review or review.user_id != str(message.from_user.id):
        await message.answer("Review not found.")
        return

    await state.update_data(review_id=review_id)
    await message.answer(
        f"New rating for {review.dish_name}? (currently {review.rating})",
        reply_markup=rating_keyboard(),
    )
    await state.set_state(EditReviewStates.waiting_rating)


@router.message(EditReviewStates.waiting_rating)
async def process_edit_rating(message: types.Message, state: FSMContext):
    try:
        rating = validate_rating(message.text or "")
    except ValueError:
        await message.answer("Please send a number from 1 to 5.")
        return

    await state.update_data(rating=rating)
    await message.answer(
        f"New comment, or send {SKIP_COMMENT} to keep the current one.",
        reply_markup=types.ReplyKeyboardRemove(),
    )
    await state.set_state(EditReviewStates.waiting_comment)


@router.message(EditReviewStates.waiting_comment)
async def process_edit_comment(message: types.Message, state: FSMContext):
    data = await state.get_data()
    review_id = data.get("review_id")
    if not review_id:
        await message.answer("Edit session expired. Start again with /editreview.")
        await state.clear()
        return

    updates = {"rating": data.get("rating")}
    if message.text != SKIP_COMMENT:
        updates["comment"] = message.text or ""

    try:
        async with get_session() as session:
            review = await ReviewService(session).update_review(review_id, updates)
    except ValueError as e:
        await message.answer(f"❌ {e}")
        await state.clear()
        return

    await message.answer(
        f"✅ Review of {review.dish_name} updated.", reply_markup=get_main_keyboard()
    )
    await state.clear()


@router.message(Command("deletereview"))
async def cmd_deletereview(message: types.Message, command: CommandObject):
    review_id = (command.args or "").strip()
    if not review_id:
        await message.answer("Usage: /deletereview <review id>")
        return

    async with get_session() as session:
        svc = ReviewService(session)
        review = await svc.get_review(review_id)
        if not review or review.user_id != str(message.from_user.id):
            await message.answer("Review not found.")
            return
        await svc.delete_review(review_id)

    await message.answer("🗑 Review deleted.")

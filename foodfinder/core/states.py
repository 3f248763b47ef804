from aiogram.fsm.state import State, StatesGroup


class DishReviewStates(StatesGroup):
    waiting_dish = State()
    waiting_rating = State()
    waiting_comment = State()


class EditReviewStates(StatesGroup):
    waiting_rating = State()
    waiting_comment = State()


class StoreReviewStates(StatesGroup):
    waiting_rating = State()
    waiting_comment = State()


class RegisterStoreStates(StatesGroup):
    waiting_name = State()
    waiting_address = State()
    waiting_category = State()


class MenuStates(StatesGroup):
    waiting_items = State()

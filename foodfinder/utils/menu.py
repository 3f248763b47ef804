from aiogram import types
from aiogram.utils.keyboard import ReplyKeyboardBuilder

ADMIN_MENU_TEXT = """
🛠 <b>Admin menu</b>

Available commands:
/pending - Stores waiting for approval
/approve &lt;id&gt; - Approve or unpublish a store
/feature &lt;id&gt; - Toggle the featured badge
/allreviews - Latest dish reviews
/removereview &lt;id&gt; - Remove a dish review
/help - Show this message
"""

USER_MENU_TEXT = """
🍲 <b>Filipino Food Finder</b>

Available commands:
/stores [search] - Find Filipino food in Singapore
/store &lt;id&gt; - Store details and menu ratings
/review &lt;id&gt; - Review a dish
/ratestore &lt;id&gt; - Rate the whole store
/contact &lt;id&gt; - Store contact number
/myreviews - Your reviews
/editreview &lt;id&gt; - Edit one of your reviews
/deletereview &lt;id&gt; - Delete one of your reviews
/fav &lt;id&gt; - Add or remove a favorite
/favorites - Your favorite stores
/profile [email|phone] [value] - View or update your profile

For business owners:
/register - Register your store
/setmenu - Replace your menu
/analytics - Views, clicks and ratings of your store
/help - Show this message
"""


def get_main_keyboard(role: str = None):
    """Reply keyboard for the given role."""
    builder = ReplyKeyboardBuilder()

    if role == "admin":
        builder.row(
            types.KeyboardButton(text="/pending"),
            types.KeyboardButton(text="/allreviews"),
        )
        builder.row(
            types.KeyboardButton(text="/stores"), types.KeyboardButton(text="/help")
        )
    else:
        builder.row(
            types.KeyboardButton(text="/stores"),
            types.KeyboardButton(text="/favorites"),
        )
        builder.row(
            types.KeyboardButton(text="/myreviews"), types.KeyboardButton(text="/help")
        )

    return builder.as_markup(resize_keyboard=True)


def get_menu_text(role: str = None):
    if role == "admin":
        return ADMIN_MENU_TEXT
    return USER_MENU_TEXT


def format_stars(rating: float) -> str:
    """Render a 0-5 rating as filled/empty stars."""
    filled = int(round(rating or 0))
    return "★" * filled + "☆" * (5 - filled)

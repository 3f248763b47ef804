"""
Data models for the Filipino Food Finder bot.
"""

from .store import Store
from .menu_item import MenuItem
from .review import DishReview
from .store_review import StoreReview
from .user import UserProfile
from .event import Event

__all__ = [
    "Store",
    "MenuItem",
    "DishReview",
    "StoreReview",
    "UserProfile",
    "Event",
]

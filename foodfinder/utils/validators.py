import re
import logging
from typing import Any

logger = logging.getLogger(__name__)


def validate_rating(value: Any) -> int:
    """
    Validate a star rating and return it as an int.

    Args:
        value: Rating as int or string ("4", " 5 ")

    Returns:
        int: Rating in the 1-5 range

    Raises:
        ValueError: If the value is not a whole number between 1 and 5
    """
    if isinstance(value, bool):
        raise ValueError("Rating must be a whole number from 1 to 5")
    if isinstance(value, str):
        value = value.strip()
        if not re.match(r"^[0-9]+$", value):
            raise ValueError(f"Invalid rating: {value}. Use a whole number from 1 to 5.")
        value = int(value)
    if not isinstance(value, int):
        raise ValueError("Rating must be a whole number from 1 to 5")
    if not 1 <= value <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return value


def validate_price(value: Any) -> float:
    """
    Validate a menu price. Accepts comma as the decimal separator.

    Raises:
        ValueError: If the price is not a number or is negative
    """
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not re.match(r"^-?[0-9]+(\.[0-9]+)?$", value):
            raise ValueError(f"Invalid price: {value}")
    price = float(value)
    if price < 0:
        raise ValueError("Price cannot be negative")
    return price


def is_valid_dish_name(name: str) -> bool:
    """Dish names must be non-empty and at most 100 characters."""
    if not name or not name.strip():
        return False
    return len(name) <= 100


def is_valid_email(email: str) -> bool:
    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    return bool(re.match(pattern, email))


def is_valid_phone(phone: str) -> bool:
    """
    Check a phone number. Singapore numbers (+65 and 8 digits) and generic
    10-15 digit international numbers are accepted.
    """
    clean_phone = re.sub(r"[^\d+]", "", phone)

    singapore_pattern = r"^(\+?65)?[689][0-9]{7}$"
    generic_pattern = r"^\+?[0-9]{10,15}$"

    return bool(
        re.match(singapore_pattern, clean_phone) or re.match(generic_pattern, clean_phone)
    )


def sanitize_input(input_str: str) -> str:
    """Strip markup characters from user text and cap its length."""
    if not input_str:
        return ""

    sanitized = re.sub(r"[<>]", "", input_str)

    return sanitized[:1000]

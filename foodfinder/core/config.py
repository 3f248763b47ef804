import os
from dotenv import load_dotenv

load_dotenv(override=True)

BOT_TOKEN = os.getenv("BOT_TOKEN")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./foodfinder.db")


admin_ids_str = os.getenv("ADMIN_CHAT_IDS", os.getenv("ADMIN_CHAT_ID", "0"))
ADMIN_CHAT_IDS = [
    int(chat_id.strip()) for chat_id in admin_ids_str.split(",") if chat_id.strip()
]


REDIS_DSN = os.getenv("REDIS_DSN", "redis://localhost:6379/0")
STORE_CACHE_TTL = int(os.getenv("STORE_CACHE_TTL", "300"))


ADMIN_REVIEW_LIMIT = int(os.getenv("ADMIN_REVIEW_LIMIT", "100"))

# Reviews under this dish name describe the whole store, not a menu item.
GENERAL_REVIEW = "General Review"

import asyncio
import logging
import sys
from pathlib import Path
from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.redis import RedisStorage
from aiogram.types import ErrorEvent

sys.path.append(str(Path(__file__).resolve().parent.parent))

from foodfinder.core.config import BOT_TOKEN, REDIS_DSN
from foodfinder.core.database import engine, Base
from foodfinder import models  # noqa: F401  registers tables on Base.metadata
from foodfinder.handlers.common_handler import router as common_router
from foodfinder.handlers.store_handler import router as store_router
from foodfinder.handlers.review_handler import router as review_router
from foodfinder.handlers.admin_handler import router as admin_router
from foodfinder.handlers.business_handler import router as business_router


async def on_startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main():
    # FSM state survives bot restarts in Redis
    storage = RedisStorage.from_url(REDIS_DSN)

    bot = Bot(token=BOT_TOKEN)
    await bot.delete_webhook(drop_pending_updates=True)

    dp = Dispatcher(storage=storage)

    dp.include_router(common_router)
    dp.include_router(admin_router)
    dp.include_router(business_router)
    dp.include_router(review_router)
    dp.include_router(store_router)

    async def global_error_handler(event: ErrorEvent) -> bool:
        logging.getLogger("aiogram").error(
            "Exception %s, update %s", event.exception, event.update
        )
        return True

    dp.errors.register(global_error_handler)

    await on_startup()
    await dp.start_polling(bot)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    asyncio.run(main())

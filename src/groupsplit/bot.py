from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.filters import ExceptionTypeFilter

from groupsplit.config import Settings, get_settings
from groupsplit.db.repo import Database, GroupRepository
from groupsplit.handlers import basic_router, expenses_router, groups_router, inline_router, on_group_error
from groupsplit.logging import configure_logging, get_logger
from groupsplit.services.errors import GroupSplitError
from groupsplit.services.groups import GroupService
from groupsplit.state import GroupSessions


def build_dispatcher(service: GroupService, sessions: GroupSessions, settings: Settings) -> Dispatcher:
    dp = Dispatcher()
    dp.include_router(basic_router)
    dp.include_router(groups_router)
    dp.include_router(expenses_router)
    dp.include_router(inline_router)
    dp.errors.register(on_group_error, ExceptionTypeFilter(GroupSplitError))

    dp["service"] = service
    dp["sessions"] = sessions
    dp["settings"] = settings
    return dp


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    db = Database(settings.database_url)
    await db.connect()
    service = GroupService(
        GroupRepository(db),
        code_length=settings.group_code_length,
        code_attempts=settings.group_code_attempts,
    )
    dp = build_dispatcher(service, GroupSessions(), settings)

    log = get_logger(__name__)
    log.info("bot.start")
    try:
        await dp.start_polling(bot)
    finally:
        await db.close()
        await bot.session.close()
        log.info("bot.stop")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

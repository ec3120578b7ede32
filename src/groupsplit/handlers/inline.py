"""Inline mode for sharing a group link into any chat."""

from aiogram import Router
from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InlineQuery,
    InlineQueryResultArticle,
    InputTextMessageContent,
)

from groupsplit.keyboards import share_url
from groupsplit.services.errors import GroupNotFoundError
from groupsplit.services.groups import GroupService

inline_router = Router()


@inline_router.inline_query()
async def inline_query_handler(inline_query: InlineQuery, service: GroupService) -> None:
    query = inline_query.query.strip()
    results = []

    if query.startswith("group_"):
        try:
            group = await service.get_group(query)
        except GroupNotFoundError:
            group = None

        if group:
            me = await inline_query.bot.me()
            keyboard = InlineKeyboardMarkup(
                inline_keyboard=[
                    [InlineKeyboardButton(text="📒 Open the group", url=share_url(me.username or "", group.code))]
                ]
            )
            results.append(
                InlineQueryResultArticle(
                    id=f"group_{group.code}",
                    title=f"Share group {group.code}",
                    description="Invite others to track expenses together",
                    input_message_content=InputTextMessageContent(
                        message_text=(
                            "💸 <b>Let's split our expenses!</b>\n\n"
                            f"Group code: <code>{group.code}</code>\n"
                            "👇 Tap the button to open it."
                        ),
                        parse_mode="HTML",
                    ),
                    reply_markup=keyboard,
                )
            )

    await inline_query.answer(results, cache_time=10, is_personal=True)

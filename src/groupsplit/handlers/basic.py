from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, ErrorEvent, Message

from groupsplit.handlers.groups import group_intro, open_group
from groupsplit.keyboards import group_menu_keyboard, start_keyboard
from groupsplit.logging import get_logger
from groupsplit.services.errors import GroupSplitError
from groupsplit.services.groups import GroupService
from groupsplit.state import GroupSessions

basic_router = Router()

HELP_TEXT = (
    "<b>📖 Commands</b>\n\n"
    "<b>Groups:</b>\n"
    "/newgroup - create a group\n"
    "/group &lt;code&gt; - open an existing group\n"
    "/share - link to share the active group\n"
    "/closegroup - delete the active group\n\n"
    "<b>Participants:</b>\n"
    "/participants - list participants\n"
    "/addp &lt;name&gt; [| &lt;name&gt; ...] - add participants\n"
    "/rmp &lt;name&gt; - remove a participant who paid nothing\n\n"
    "<b>Expenses:</b>\n"
    "/expenses - list expenses\n"
    "/addexpense &lt;payer&gt; | &lt;amount&gt; | &lt;description&gt; | &lt;names or all&gt;\n"
    "/rmexpense &lt;id&gt; - remove an expense\n\n"
    "<b>Settling up:</b>\n"
    "/balances - net balance of everyone\n"
    "/settle - who pays whom\n"
)


@basic_router.message(CommandStart())
async def cmd_start(
    message: Message,
    command: CommandObject,
    service: GroupService,
    sessions: GroupSessions,
    bot: Bot,
) -> None:
    user = message.from_user
    if not user:
        return

    # deep link: /start group_<code>
    if command.args and command.args.startswith("group_"):
        await open_group(message, command.args, service, sessions, bot)
        return

    code = sessions.get_current_group(user.id)
    if code:
        await message.answer(await group_intro(bot, code), reply_markup=group_menu_keyboard(code))
        return

    await message.answer(
        f"👋 Hi, {user.first_name}!\n\n"
        "I keep track of shared expenses and tell everyone who owes whom. "
        "No sign-up: create a group and share its link.",
        reply_markup=start_keyboard(),
        parse_mode=None,
    )


@basic_router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@basic_router.callback_query(F.data == "menu:help")
async def cb_help(callback: CallbackQuery) -> None:
    if isinstance(callback.message, Message):
        await callback.message.answer(HELP_TEXT)
    await callback.answer()


@basic_router.callback_query(F.data == "menu:newgroup")
async def cb_newgroup(callback: CallbackQuery, service: GroupService, sessions: GroupSessions, bot: Bot) -> None:
    group = await service.create_group()
    sessions.set_current_group(callback.from_user.id, group.code)
    if isinstance(callback.message, Message):
        await callback.message.answer(
            f"✅ New group created.\n\n{await group_intro(bot, group.code)}",
            reply_markup=group_menu_keyboard(group.code),
        )
    await callback.answer()


async def on_group_error(event: ErrorEvent) -> None:
    """Reply with the message of a domain error instead of failing the update."""
    log = get_logger(__name__)
    log.info("update.rejected", error=type(event.exception).__name__, detail=str(event.exception))
    update = event.update
    if update.message:
        await update.message.answer(f"⚠️ {event.exception}", parse_mode=None)
    elif update.callback_query:
        await update.callback_query.answer(str(event.exception), show_alert=True)

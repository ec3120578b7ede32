from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from groupsplit.config import Settings
from groupsplit.keyboards import back_keyboard, expenses_keyboard, group_menu_keyboard, share_url
from groupsplit.services.groups import GroupService
from groupsplit.services.summary import (
    format_balances,
    format_expenses,
    format_participants,
    format_settlement,
)
from groupsplit.state import GroupSessions, require_current_group
from groupsplit.utils.parse import split_args

groups_router = Router()


async def group_intro(bot: Bot, code: str) -> str:
    me = await bot.me()
    return (
        f"📒 Group <code>{code}</code> is active.\n\n"
        f"Share this link so others can open it:\n{share_url(me.username or '', code)}"
    )


async def render_view(
    view: str,
    code: str,
    service: GroupService,
    settings: Settings,
) -> tuple[str, InlineKeyboardMarkup]:
    if view == "participants":
        snapshot = await service.snapshot(code)
        return format_participants(snapshot.participants), back_keyboard()
    if view == "expenses":
        snapshot = await service.snapshot(code)
        return format_expenses(snapshot, settings.currency_label), expenses_keyboard(snapshot.expenses)
    if view == "balances":
        settlement = await service.settlement(code)
        return format_balances(settlement, settings.currency_label), back_keyboard()
    if view == "settle":
        settlement = await service.settlement(code)
        return format_settlement(settlement, settings.currency_label), back_keyboard()
    return f"Group <code>{code}</code>", group_menu_keyboard(code)


async def open_group(message: Message, code: str, service: GroupService, sessions: GroupSessions, bot: Bot) -> None:
    user = message.from_user
    if not user:
        return
    group = await service.get_group(code)
    sessions.set_current_group(user.id, group.code)
    await message.answer(await group_intro(bot, group.code), reply_markup=group_menu_keyboard(group.code))


@groups_router.message(Command("newgroup"))
async def cmd_newgroup(message: Message, service: GroupService, sessions: GroupSessions, bot: Bot) -> None:
    user = message.from_user
    if not user:
        return
    group = await service.create_group()
    sessions.set_current_group(user.id, group.code)
    await message.answer(
        f"✅ New group created.\n\n{await group_intro(bot, group.code)}\n\n"
        "Add people with /addp &lt;name&gt;.",
        reply_markup=group_menu_keyboard(group.code),
    )


@groups_router.message(Command("group"))
async def cmd_group(message: Message, service: GroupService, sessions: GroupSessions, bot: Bot) -> None:
    parts = (message.text or "").split()
    if len(parts) != 2:
        await message.answer("Usage: /group &lt;code&gt;")
        return
    await open_group(message, parts[1], service, sessions, bot)


@groups_router.message(Command("share"))
async def cmd_share(message: Message, service: GroupService, sessions: GroupSessions, bot: Bot) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    group = await service.get_group(code)
    await message.answer(await group_intro(bot, group.code))


@groups_router.message(Command("closegroup"))
async def cmd_closegroup(message: Message, service: GroupService, sessions: GroupSessions) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    parts = (message.text or "").split()
    if len(parts) != 2 or parts[1].lower() != code:
        await message.answer(
            f"This deletes every participant and expense of the group.\n"
            f"Confirm with /closegroup {code}"
        )
        return
    await service.delete_group(code)
    sessions.forget_group(code)
    await message.answer("🗑 Group deleted.")


@groups_router.message(Command("participants"))
async def cmd_participants(message: Message, service: GroupService, sessions: GroupSessions) -> None:
    user = message.from_user
    if not user:
        return
    snapshot = await service.snapshot(require_current_group(sessions, user.id))
    await message.answer(format_participants(snapshot.participants))


@groups_router.message(Command("addp"))
async def cmd_addp(message: Message, service: GroupService, sessions: GroupSessions) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    names = split_args(message.text, "addp")
    if not names:
        await message.answer("Usage: /addp &lt;name&gt; [| &lt;name&gt; ...]")
        return
    added = await service.add_participants(code, names)
    await message.answer(f"👤 Added: {', '.join(p.name for p in added)}", parse_mode=None)


@groups_router.message(Command("rmp"))
async def cmd_rmp(message: Message, service: GroupService, sessions: GroupSessions) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    args = split_args(message.text, "rmp")
    if len(args) != 1:
        await message.answer("Usage: /rmp &lt;name&gt;")
        return
    snapshot = await service.snapshot(code)
    wanted = " ".join(args[0].split()).lower()
    matches = [p for p in snapshot.participants if p.name.lower() == wanted]
    if not matches:
        await message.answer(f"No participant named {args[0]}.", parse_mode=None)
        return
    removed = await service.remove_participant(code, matches[0].id)
    await message.answer(f"👋 Removed {removed.name}.", parse_mode=None)


@groups_router.message(Command("balances"))
async def cmd_balances(message: Message, service: GroupService, sessions: GroupSessions, settings: Settings) -> None:
    user = message.from_user
    if not user:
        return
    text, _ = await render_view("balances", require_current_group(sessions, user.id), service, settings)
    await message.answer(text)


@groups_router.message(Command("settle"))
async def cmd_settle(message: Message, service: GroupService, sessions: GroupSessions, settings: Settings) -> None:
    user = message.from_user
    if not user:
        return
    text, _ = await render_view("settle", require_current_group(sessions, user.id), service, settings)
    await message.answer(text)


@groups_router.callback_query(F.data.startswith("group:"))
async def cb_group_view(
    callback: CallbackQuery,
    service: GroupService,
    sessions: GroupSessions,
    settings: Settings,
) -> None:
    code = require_current_group(sessions, callback.from_user.id)
    view = (callback.data or "").split(":", 1)[1]
    text, keyboard = await render_view(view, code, service, settings)
    if isinstance(callback.message, Message):
        await callback.message.edit_text(text, reply_markup=keyboard)
    await callback.answer()
